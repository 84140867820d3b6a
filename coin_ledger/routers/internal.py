import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from coin_ledger.core.dependencies import (
    get_session, access_internal, get_balance_service, get_withdrawal_service
)
from coin_ledger.models import Course, StoreItem, User
from coin_ledger.schemas.coins import (
    ActivityRewardRequest, ActivityRewardResponse, CoinsBalanceResponse,
    GiftRequest, GiftResponse, PayWithCoinsRequest, PayWithCoinsResponse,
    ReferralRewardRequest, ReferralRewardResponse
)
from coin_ledger.schemas.courses import (
    CompleteCourseRequest, CompleteCourseResponse, CourseCompletionOut,
    CourseOut, CourseUpsert, UserRegisterResponse
)
from coin_ledger.schemas.serializers import serialize_transaction
from coin_ledger.schemas.store import (
    StoreItemOut, StoreItemUpsert, StorePurchaseRequest, StorePurchaseResponse
)
from coin_ledger.schemas.transactions import TransactionPaginatedList
from coin_ledger.schemas.withdrawals import (
    CashoutRequest, CashoutResponse, WithdrawalOut
)
from coin_ledger.services.balance import BalanceService
from coin_ledger.services.completions import CompletionService
from coin_ledger.services.purchases import PurchaseService
from coin_ledger.services.referrals import ReferralService
from coin_ledger.services.rewards import ActivityRewardService
from coin_ledger.services.store import StoreService
from coin_ledger.services.transfers import TransferService
from coin_ledger.services.withdrawals import WithdrawalService
from coin_ledger.utils.common import calculate_coin_price, utc_now
from coin_ledger.utils.sql import insert_or_ignore

logger = logging.getLogger("[INTERNAL]")


# Internal API (для інших внутрішніх сервісів: auth, каталог, фронтенд-gateway)
internal_router = APIRouter(
    prefix="/api/internal",
    tags=["Internal API"],
    dependencies=[Depends(access_internal)],
)


@internal_router.put(
    "/users/{user_id}",
    summary="Реєстрація користувача з auth-сервісу",
    description="Лише внутрішній доступ. Headers: X-Service-Token. Ідемпотентно.",
    response_model=UserRegisterResponse,
    status_code=status.HTTP_200_OK,
)
async def register_user(
    user_id: str,
    session: AsyncSession = Depends(get_session),
):
    result = await session.execute(
        insert_or_ignore(
            session, User, id=user_id, created_at=utc_now()
        ).returning(User.id)
    )
    created = result.scalar_one_or_none() is not None
    await session.commit()

    if created:
        logger.info(f"Registered user '{user_id}'")
    return UserRegisterResponse(user_id=user_id, created=created)


@internal_router.put(
    "/courses/{course_id}",
    summary="Синхронізація курсу з каталогу",
    description="Лише внутрішній доступ. Headers: X-Service-Token",
    response_model=CourseOut,
    status_code=status.HTTP_200_OK,
)
async def upsert_course(
    course_id: str,
    payload: CourseUpsert,
    session: AsyncSession = Depends(get_session),
):
    course = await session.get(Course, course_id)
    if course is None:
        course = Course(id=course_id, title=payload.title, price=payload.price)
        session.add(course)
    else:
        course.title = payload.title
        course.price = payload.price
    await session.commit()

    return CourseOut(
        id=course.id,
        title=course.title,
        price=float(course.price),
        price_coins=calculate_coin_price(course.price),
    )


@internal_router.get(
    "/coins/balance/{user_id}",
    summary="Отримання балансу coins користувача",
    description="Лише внутрішній доступ. Headers: X-Service-Token",
    response_model=CoinsBalanceResponse,
    status_code=status.HTTP_200_OK,
    responses={
        403: {
            "description": "Forbidden.",
            "content": {
                "application/json": {
                    "example": {"success": False, "error": "Invalid service token.", "code": "FORBIDDEN"}
                },
            },
        },
        404: {
            "description": "Not found.",
            "content": {
                "application/json": {
                    "example": {"success": False, "error": "User not found.", "code": "USER_NOT_FOUND"}
                },
            },
        },
    },
)
async def user_coins_balance(
    user_id: str,
    balance_service: BalanceService = Depends(get_balance_service),
):
    coins = await balance_service.get_balance(user_id)
    return CoinsBalanceResponse(user_id=user_id, coins=coins)


@internal_router.get(
    "/coins/transactions/{user_id}",
    summary="Історія транзакцій coins",
    description="Лише внутрішній доступ. Headers: X-Service-Token",
    response_model=TransactionPaginatedList,
    status_code=status.HTTP_200_OK,
)
async def user_coins_transactions(
    user_id: str,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    balance_service: BalanceService = Depends(get_balance_service),
):
    total, transactions = await balance_service.list_transactions(
        user_id, limit=limit, offset=offset
    )
    return TransactionPaginatedList(
        user_id=user_id,
        total=total,
        limit=limit,
        offset=offset,
        transactions=[serialize_transaction(tx) for tx in transactions],
    )


@internal_router.post(
    "/coins/pay",
    summary="Оплата курсу coins",
    description="Лише внутрішній доступ. Headers: X-Service-Token",
    response_model=PayWithCoinsResponse,
    status_code=status.HTTP_200_OK,
    responses={
        402: {
            "description": "Payment required.",
            "content": {
                "application/json": {
                    "example": {"success": False, "error": "Insufficient coins.", "code": "INSUFFICIENT_FUNDS"}
                },
            },
        },
        404: {
            "description": "Not found.",
            "content": {
                "application/json": {
                    "example": {"success": False, "error": "Course not found.", "code": "COURSE_NOT_FOUND"}
                },
            },
        },
        409: {
            "description": "Conflict.",
            "content": {
                "application/json": {
                    "example": {"success": False, "error": "Already enrolled.", "code": "ALREADY_ENROLLED"}
                },
            },
        },
    },
)
async def pay_with_coins(
    payload: PayWithCoinsRequest,
    session: AsyncSession = Depends(get_session),
):
    result = await PurchaseService(session).pay_with_coins(
        payload.user_id, payload.course_id
    )
    return PayWithCoinsResponse(**result)


@internal_router.post(
    "/coins/cashout",
    summary="Заявка на виведення coins",
    description="Лише внутрішній доступ. Headers: X-Service-Token",
    response_model=CashoutResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {
            "description": "Bad request.",
            "content": {
                "application/json": {
                    "example": {"success": False, "error": "Minimum cashout is 1000 coins.", "code": "BELOW_MINIMUM"}
                },
            },
        },
        402: {
            "description": "Payment required.",
            "content": {
                "application/json": {
                    "example": {"success": False, "error": "Insufficient coins.", "code": "INSUFFICIENT_FUNDS"}
                },
            },
        },
    },
)
async def request_cashout(
    payload: CashoutRequest,
    withdrawal_service: WithdrawalService = Depends(get_withdrawal_service),
):
    withdrawal = await withdrawal_service.request_cashout(
        payload.user_id,
        payload.amount_coins,
        payload.payment_method,
        payload.payment_details,
    )
    return CashoutResponse(withdrawal=WithdrawalOut.model_validate(withdrawal))


@internal_router.post(
    "/courses/complete",
    summary="Завершення курсу",
    description="Лише внутрішній доступ. Headers: X-Service-Token. Повторні виклики ідемпотентні.",
    response_model=CompleteCourseResponse,
    status_code=status.HTTP_200_OK,
)
async def complete_course(
    payload: CompleteCourseRequest,
    session: AsyncSession = Depends(get_session),
):
    completion, created = await CompletionService(session).record_completion(
        payload.user_id, payload.course_id
    )
    return CompleteCourseResponse(
        created=created,
        data=CourseCompletionOut.model_validate(completion),
    )


@internal_router.post(
    "/coins/activity",
    summary="Нарахування coins за активність у курсі",
    description="Лише внутрішній доступ. Headers: X-Service-Token. Один раз на день для кожної дії.",
    response_model=ActivityRewardResponse,
    status_code=status.HTTP_200_OK,
)
async def award_activity_coins(
    payload: ActivityRewardRequest,
    session: AsyncSession = Depends(get_session),
):
    result = await ActivityRewardService(session).award(
        payload.user_id, payload.course_id, payload.action_type
    )
    return ActivityRewardResponse(**result)


@internal_router.post(
    "/coins/gift",
    summary="Подарунок coins іншому користувачу",
    description="Лише внутрішній доступ. Headers: X-Service-Token. Ідемпотентно за operation_id.",
    response_model=GiftResponse,
    status_code=status.HTTP_200_OK,
)
async def send_coins_gift(
    payload: GiftRequest,
    session: AsyncSession = Depends(get_session),
):
    result = await TransferService(session).send_gift(
        payload.sender_id,
        payload.recipient_id,
        payload.amount,
        payload.operation_id,
        payload.message,
    )
    return GiftResponse(**result)


@internal_router.post(
    "/coins/referral",
    summary="Нагорода рефереру за запрошеного користувача",
    description="Лише внутрішній доступ. Headers: X-Service-Token. Один раз на запрошеного користувача.",
    response_model=ReferralRewardResponse,
    status_code=status.HTTP_200_OK,
)
async def award_referral_coins(
    payload: ReferralRewardRequest,
    session: AsyncSession = Depends(get_session),
):
    result = await ReferralService(session).award_referral(
        payload.referrer_id, payload.referred_user_id, payload.course_id
    )
    return ReferralRewardResponse(**result)


@internal_router.put(
    "/store/items/{item_id}",
    summary="Синхронізація товару магазину",
    description="Лише внутрішній доступ. Headers: X-Service-Token. stock_quantity=-1 - необмежений запас.",
    response_model=StoreItemOut,
    status_code=status.HTTP_200_OK,
)
async def upsert_store_item(
    item_id: str,
    payload: StoreItemUpsert,
    session: AsyncSession = Depends(get_session),
):
    item = await session.get(StoreItem, item_id)
    if item is None:
        item = StoreItem(id=item_id)
        session.add(item)
    item.name = payload.name
    item.price = payload.price
    item.stock_quantity = payload.stock_quantity
    item.is_active = payload.is_active
    await session.commit()

    return StoreItemOut.model_validate(item)


@internal_router.post(
    "/coins/store/purchase",
    summary="Покупка товару з магазину за coins",
    description="Лише внутрішній доступ. Headers: X-Service-Token",
    response_model=StorePurchaseResponse,
    status_code=status.HTTP_200_OK,
    responses={
        402: {
            "description": "Payment required.",
            "content": {
                "application/json": {
                    "example": {"success": False, "error": "Insufficient coins.", "code": "INSUFFICIENT_FUNDS"}
                },
            },
        },
        404: {
            "description": "Not found.",
            "content": {
                "application/json": {
                    "example": {"success": False, "error": "Store item not found.", "code": "ITEM_NOT_FOUND"}
                },
            },
        },
        409: {
            "description": "Conflict.",
            "content": {
                "application/json": {
                    "example": {"success": False, "error": "Insufficient stock.", "code": "INSUFFICIENT_STOCK"}
                },
            },
        },
    },
)
async def purchase_store_item(
    payload: StorePurchaseRequest,
    session: AsyncSession = Depends(get_session),
):
    result = await StoreService(session).purchase_item(
        payload.user_id, payload.item_id, payload.quantity
    )
    return StorePurchaseResponse(**result)
