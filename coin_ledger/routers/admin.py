import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from coin_ledger.core.dependencies import (
    Caller, access_admin, get_balance_service, get_withdrawal_service
)
from coin_ledger.models import WithdrawalStatus
from coin_ledger.schemas.coins import ReconciliationResponse
from coin_ledger.schemas.withdrawals import (
    ResolveWithdrawalRequest, ResolveWithdrawalResponse,
    WithdrawalOut, WithdrawalPaginatedList
)
from coin_ledger.services.balance import BalanceService
from coin_ledger.services.withdrawals import WithdrawalService

logger = logging.getLogger("[ADMIN]")


# Admin API
admin_router = APIRouter(prefix="/api/admin", tags=["Admin API"])


@admin_router.post(
    "/withdrawals/{withdrawal_id}/resolve",
    summary="Підтвердження або відхилення заявки на виведення",
    description=(
        "Доступ лише для адміністратора. Headers: X-Admin-Token, X-Admin-Id (опційно). "
        "reject повертає coins користувачу."
    ),
    response_model=ResolveWithdrawalResponse,
    status_code=status.HTTP_200_OK,
    responses={
        403: {
            "description": "Forbidden.",
            "content": {
                "application/json": {
                    "example": {"success": False, "error": "Invalid admin token.", "code": "FORBIDDEN"}
                },
            },
        },
        404: {
            "description": "Not found.",
            "content": {
                "application/json": {
                    "example": {"success": False, "error": "Withdrawal request not found.", "code": "WITHDRAWAL_NOT_FOUND"}
                },
            },
        },
        409: {
            "description": "Conflict.",
            "content": {
                "application/json": {
                    "example": {"success": False, "error": "Already processed.", "code": "ALREADY_PROCESSED"}
                },
            },
        },
    },
)
async def resolve_withdrawal(
    withdrawal_id: str,
    payload: ResolveWithdrawalRequest,
    caller: Caller = Depends(access_admin),
    withdrawal_service: WithdrawalService = Depends(get_withdrawal_service),
):
    withdrawal = await withdrawal_service.resolve(
        caller, withdrawal_id, payload.action
    )
    return ResolveWithdrawalResponse(
        withdrawal=WithdrawalOut.model_validate(withdrawal)
    )


@admin_router.get(
    "/withdrawals",
    dependencies=[Depends(access_admin)],
    summary="Список заявок на виведення",
    description="Доступ лише для адміністратора. Headers: X-Admin-Token",
    response_model=WithdrawalPaginatedList,
    status_code=status.HTTP_200_OK,
)
async def list_withdrawals(
    status_filter: Optional[WithdrawalStatus] = Query(None, alias="status"),
    user_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    withdrawal_service: WithdrawalService = Depends(get_withdrawal_service),
):
    total, withdrawals = await withdrawal_service.list_withdrawals(
        status=status_filter, user_id=user_id, limit=limit, offset=offset
    )
    return WithdrawalPaginatedList(
        total=total,
        limit=limit,
        offset=offset,
        withdrawals=[WithdrawalOut.model_validate(w) for w in withdrawals],
    )


@admin_router.get(
    "/withdrawals/{withdrawal_id}",
    dependencies=[Depends(access_admin)],
    summary="Деталі заявки на виведення",
    description="Доступ лише для адміністратора. Headers: X-Admin-Token",
    response_model=WithdrawalOut,
    status_code=status.HTTP_200_OK,
)
async def get_withdrawal(
    withdrawal_id: str,
    withdrawal_service: WithdrawalService = Depends(get_withdrawal_service),
):
    withdrawal = await withdrawal_service.get(withdrawal_id)
    return WithdrawalOut.model_validate(withdrawal)


@admin_router.get(
    "/coins/reconcile/{user_id}",
    dependencies=[Depends(access_admin)],
    summary="Звірка балансу з журналом транзакцій",
    description="Доступ лише для адміністратора. Headers: X-Admin-Token",
    response_model=ReconciliationResponse,
    status_code=status.HTTP_200_OK,
)
async def reconcile_user_coins(
    user_id: str,
    balance_service: BalanceService = Depends(get_balance_service),
):
    report = await balance_service.reconcile(user_id)
    if not report["consistent"]:
        logger.warning(f"Reconciliation mismatch for user '{user_id}'")
    return ReconciliationResponse(**report)
