import logging
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from coin_ledger.core.exceptions import (
	InsufficientFunds, UserNotFound, ValidationError
)
from coin_ledger.models import Transaction, TransactionType, User, UserBalance
from coin_ledger.utils.common import generate_transaction_id, utc_now
from coin_ledger.utils.logging import get_extra_data_log
from coin_ledger.utils.sql import insert_or_ignore

logger = logging.getLogger("[LEDGER]")


class BalanceService:
	"""
	Баланс користувача + журнал транзакцій.

	debit/credit не роблять commit: вони виконуються всередині
	unit of work того, хто їх викликає (покупка, заявка, відхилення),
	тому зміна балансу і парний запис фіксуються разом.
	"""

	def __init__(self, session: AsyncSession):
		self.session = session

	async def ensure_user(self, user_id: str) -> User:
		user = await self.session.get(User, user_id)
		if not user:
			raise UserNotFound(f"User '{user_id}' not found.")
		return user

	async def get_balance(self, user_id: str) -> int:
		"""Поточний баланс одним запитом; 0 якщо рядка балансу ще немає."""
		result = await self.session.execute(
			select(User.id, UserBalance.coins)
			.outerjoin(UserBalance, UserBalance.user_id == User.id)
			.where(User.id == user_id)
		)
		row = result.first()
		if row is None:
			raise UserNotFound(f"User '{user_id}' not found.")
		return row.coins or 0

	async def debit(
		self,
		user_id: str,
		amount: int,
		tx_type: TransactionType,
		related_id: Optional[str] = None,
		description: Optional[str] = None,
		operation_id: Optional[str] = None,
	) -> Transaction:
		"""
		Атомарне списання: UPDATE ... WHERE coins >= amount.
		Якщо рядок не оновився - InsufficientFunds, баланс не змінюється.
		"""
		self._check_amount(amount)
		await self.ensure_user(user_id)
		await self._ensure_balance_row(user_id)

		result = await self.session.execute(
			update(UserBalance)
			.where(UserBalance.user_id == user_id, UserBalance.coins >= amount)
			.values(coins=UserBalance.coins - amount, updated_at=utc_now())
			.returning(UserBalance.coins)
		)
		balance_after = result.scalar_one_or_none()
		if balance_after is None:
			raise InsufficientFunds(
				f"Insufficient coins: {amount} required.",
				details={"user_id": user_id, "required": amount},
			)

		return await self._append(
			user_id, -amount, balance_after, tx_type,
			related_id, description, operation_id
		)

	async def credit(
		self,
		user_id: str,
		amount: int,
		tx_type: TransactionType,
		related_id: Optional[str] = None,
		description: Optional[str] = None,
		operation_id: Optional[str] = None,
	) -> Transaction:
		self._check_amount(amount)
		await self.ensure_user(user_id)
		await self._ensure_balance_row(user_id)

		result = await self.session.execute(
			update(UserBalance)
			.where(UserBalance.user_id == user_id)
			.values(coins=UserBalance.coins + amount, updated_at=utc_now())
			.returning(UserBalance.coins)
		)
		balance_after = result.scalar_one()

		return await self._append(
			user_id, amount, balance_after, tx_type,
			related_id, description, operation_id
		)

	async def lock_balances(self, user_ids: Iterable[str]) -> None:
		"""Блокує рядки балансів у стабільному порядку (без deadlock між зустрічними переказами)."""
		ordered = sorted(set(user_ids))
		for user_id in ordered:
			await self._ensure_balance_row(user_id)
		await self.session.execute(
			select(UserBalance.user_id)
			.where(UserBalance.user_id.in_(ordered))
			.order_by(UserBalance.user_id)
			.with_for_update()
		)

	async def list_transactions(
		self, user_id: str, limit: int = 50, offset: int = 0
	) -> Tuple[int, List[Transaction]]:
		await self.ensure_user(user_id)

		total = await self.session.scalar(
			select(func.count()).select_from(Transaction)
			.where(Transaction.user_id == user_id)
		)
		result = await self.session.execute(
			select(Transaction)
			.where(Transaction.user_id == user_id)
			.order_by(Transaction.created_at.desc(), Transaction.id.desc())
			.limit(limit)
			.offset(offset)
		)
		return total or 0, list(result.scalars().all())

	async def reconcile(self, user_id: str) -> dict:
		"""Звірка: сума транзакцій == баланс."""
		balance = await self.get_balance(user_id)
		ledger_sum = await self.session.scalar(
			select(func.coalesce(func.sum(Transaction.amount), 0))
			.where(Transaction.user_id == user_id)
		)
		ledger_sum = int(ledger_sum or 0)
		if ledger_sum != balance:
			logger.error(
				f"Reconciliation mismatch for '{user_id}': "
				f"balance={balance}, ledger_sum={ledger_sum}"
			)
		return {
			"user_id": user_id,
			"balance": balance,
			"ledger_sum": ledger_sum,
			"consistent": ledger_sum == balance,
		}

	@staticmethod
	def _check_amount(amount: int):
		if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
			raise ValidationError("Amount must be a positive integer.")

	async def _ensure_balance_row(self, user_id: str):
		# рядок балансу створюється ліниво з 0
		await self.session.execute(
			insert_or_ignore(
				self.session, UserBalance,
				user_id=user_id, coins=0, updated_at=utc_now()
			)
		)

	async def _append(
		self,
		user_id: str,
		amount: int,
		balance_after: int,
		tx_type: TransactionType,
		related_id: Optional[str],
		description: Optional[str],
		operation_id: Optional[str],
	) -> Transaction:
		new_tx = Transaction(
			id=generate_transaction_id(),
			user_id=user_id,
			type=tx_type,
			amount=amount,
			balance_after=balance_after,
			related_id=related_id,
			description=description,
			operation_id=operation_id,
			created_at=utc_now(),
		)
		self.session.add(new_tx)
		await self.session.flush()

		logger.info(
			"Updated coins. Transaction:",
			extra=get_extra_data_log(new_tx)
		)
		return new_tx
