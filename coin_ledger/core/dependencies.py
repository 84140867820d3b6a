from dataclasses import dataclass
from typing import Optional

from fastapi import Header, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coin_ledger.core.config import config
from coin_ledger.core.database import async_session
from coin_ledger.core.exceptions import Forbidden
from coin_ledger.services.balance import BalanceService
from coin_ledger.services.withdrawals import WithdrawalService


@dataclass(frozen=True)
class Caller:
    """Ідентичність викликача, вже перевірена auth-сервісом."""
    id: str
    is_admin: bool = False


# Dependency для отримання сесії
async def get_session() -> AsyncSession:
    async with async_session() as session:
        yield session


# Dependency: перевірка адмін токену
def access_admin(
    x_admin_token: str = Header(...),
    x_admin_id: Optional[str] = Header(None),
) -> Caller:
    if x_admin_token != config.ADMIN_TOKEN:
        raise Forbidden("Invalid admin token.")
    return Caller(id=x_admin_id or "admin", is_admin=True)


# Dependency: перевірка internal токену
def access_internal(x_service_token: str = Header(...)):
    if x_service_token != config.SERVICE_TOKEN:
        raise Forbidden("Invalid service token.")


def get_balance_service(session: AsyncSession = Depends(get_session)) -> BalanceService:
    return BalanceService(session)


def get_withdrawal_service(session: AsyncSession = Depends(get_session)) -> WithdrawalService:
    return WithdrawalService(session)
