import logging
from typing import List, Optional, Tuple, TYPE_CHECKING

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from coin_ledger.core.config import config
from coin_ledger.core.database import unit_of_work
from coin_ledger.core.exceptions import (
	AlreadyProcessed, BelowMinimum, Forbidden, InsufficientFunds,
	MissingParameters, ValidationError, WithdrawalNotFound
)
from coin_ledger.models import (
	AdminLog, AdminOperationType, TransactionType,
	WithdrawalRequest, WithdrawalStatus
)
from coin_ledger.services.balance import BalanceService
from coin_ledger.utils.common import calculate_cash_amount, generate_id, utc_now
from coin_ledger.utils.logging import generate_admin_log_id, get_extra_data_log

if TYPE_CHECKING:
	from coin_ledger.core.dependencies import Caller

logger = logging.getLogger("[LEDGER]")
admin_logger = logging.getLogger("[ADMIN]")

ACTIONS = {
	"approve": (WithdrawalStatus.APPROVED, AdminOperationType.APPROVE_WITHDRAWAL),
	"reject": (WithdrawalStatus.REJECTED, AdminOperationType.REJECT_WITHDRAWAL),
}


class WithdrawalService:
	"""
	Заявки на виведення coins і їх адміністративне вирішення.

	pending -> approved: coins вже списані при створенні заявки.
	pending -> rejected: refund у тій самій транзакції, що й зміна статусу.
	"""

	def __init__(
		self,
		session: AsyncSession,
		conversion_rate: int | None = None,
		min_cashout_coins: int | None = None,
	):
		self.session = session
		self.balances = BalanceService(session)
		self.conversion_rate = conversion_rate or config.COIN_TO_CASH_RATE
		self.min_cashout_coins = (
			config.MIN_CASHOUT_COINS if min_cashout_coins is None else min_cashout_coins
		)

	async def request_cashout(
		self,
		user_id: str,
		amount_coins: Optional[int],
		payment_method: Optional[str],
		payment_details: Optional[dict],
	) -> WithdrawalRequest:
		# (1) усі поля присутні
		if not user_id or not amount_coins or not payment_method or not payment_details:
			raise MissingParameters()
		if not isinstance(amount_coins, int) or isinstance(amount_coins, bool):
			raise ValidationError("amount_coins must be an integer.")
		# (2) мінімальна сума
		if amount_coins < self.min_cashout_coins:
			raise BelowMinimum(f"Minimum cashout is {self.min_cashout_coins} coins.")

		async with unit_of_work(self.session):
			# (3) швидка перевірка балансу; остаточно вирішує умовний UPDATE у debit
			balance = await self.balances.get_balance(user_id)
			if balance < amount_coins:
				raise InsufficientFunds(
					"Insufficient coins.",
					details={"balance": balance, "required": amount_coins},
				)

			amount_cash = calculate_cash_amount(amount_coins, self.conversion_rate)
			withdrawal_id = generate_id("wd")

			await self.balances.debit(
				user_id,
				amount_coins,
				TransactionType.CASHOUT_REQUEST,
				related_id=withdrawal_id,
				description=f"Requested cashout of {amount_coins} coins ({amount_cash})",
			)

			withdrawal = WithdrawalRequest(
				id=withdrawal_id,
				user_id=user_id,
				amount_coins=amount_coins,
				amount_cash=amount_cash,
				conversion_rate=self.conversion_rate,
				payment_method=payment_method,
				payment_details=payment_details,
				status=WithdrawalStatus.PENDING,
				created_at=utc_now(),
			)
			self.session.add(withdrawal)
			await self.session.flush()

		logger.info(
			"Created withdrawal request:",
			extra=get_extra_data_log(withdrawal)
		)
		return withdrawal

	async def resolve(
		self, caller: "Caller", withdrawal_id: str, action: str
	) -> WithdrawalRequest:
		if caller is None or not caller.is_admin:
			raise Forbidden("Only administrators can resolve withdrawals.")
		if action not in ACTIONS:
			raise ValidationError(f"Invalid action '{action}'.")
		new_status, operation_type = ACTIONS[action]

		async with unit_of_work(self.session):
			# умовний перехід: оновлюється лише pending заявка
			result = await self.session.execute(
				update(WithdrawalRequest)
				.where(
					WithdrawalRequest.id == withdrawal_id,
					WithdrawalRequest.status == WithdrawalStatus.PENDING,
				)
				.values(
					status=new_status,
					processed_at=utc_now(),
					processed_by=caller.id,
				)
				.returning(WithdrawalRequest)
			)
			withdrawal = result.scalar_one_or_none()

			if withdrawal is None:
				existing = await self.session.get(WithdrawalRequest, withdrawal_id)
				if existing is None:
					raise WithdrawalNotFound(f"Withdrawal '{withdrawal_id}' not found.")
				raise AlreadyProcessed(
					f"Withdrawal '{withdrawal_id}' already {existing.status.value}.",
					details={"status": existing.status.value},
				)

			if new_status == WithdrawalStatus.REJECTED:
				await self.balances.credit(
					withdrawal.user_id,
					withdrawal.amount_coins,
					TransactionType.REFUND,
					related_id=withdrawal.id,
					description=f"Refund for rejected cashout of {withdrawal.amount_coins} coins",
				)

			admin_log = AdminLog(
				id=generate_admin_log_id(operation_type.value),
				operation_type=operation_type,
				admin_id=caller.id,
				entity="WithdrawalRequest",
				entity_id=withdrawal.id,
				changes={
					"field": "status",
					"old": WithdrawalStatus.PENDING.value,
					"new": new_status.value,
					"amount_coins": withdrawal.amount_coins,
				},
				created_at=utc_now(),
			)
			self.session.add(admin_log)
			await self.session.flush()

		admin_logger.info(
			f"Withdrawal {new_status.value}. AdminLog:",
			extra=get_extra_data_log(admin_log)
		)
		return withdrawal

	async def get(self, withdrawal_id: str) -> WithdrawalRequest:
		withdrawal = await self.session.get(WithdrawalRequest, withdrawal_id)
		if withdrawal is None:
			raise WithdrawalNotFound(f"Withdrawal '{withdrawal_id}' not found.")
		return withdrawal

	async def list_withdrawals(
		self,
		status: Optional[WithdrawalStatus] = None,
		user_id: Optional[str] = None,
		limit: int = 50,
		offset: int = 0,
	) -> Tuple[int, List[WithdrawalRequest]]:
		query = select(WithdrawalRequest)
		count_query = select(func.count()).select_from(WithdrawalRequest)
		if status is not None:
			query = query.where(WithdrawalRequest.status == status)
			count_query = count_query.where(WithdrawalRequest.status == status)
		if user_id is not None:
			query = query.where(WithdrawalRequest.user_id == user_id)
			count_query = count_query.where(WithdrawalRequest.user_id == user_id)

		total = await self.session.scalar(count_query)
		result = await self.session.execute(
			query.order_by(WithdrawalRequest.created_at.desc())
			.limit(limit)
			.offset(offset)
		)
		return total or 0, list(result.scalars().all())
