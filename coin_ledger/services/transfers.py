import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coin_ledger.core.database import unit_of_work
from coin_ledger.core.exceptions import DuplicateOperation, ValidationError
from coin_ledger.models import TransactionType
from coin_ledger.services.balance import BalanceService
from coin_ledger.utils.idempotency import check_idempotency

logger = logging.getLogger("[LEDGER]")


class TransferService:
	"""Подарунок coins іншому користувачу."""

	def __init__(self, session: AsyncSession):
		self.session = session
		self.balances = BalanceService(session)

	async def send_gift(
		self,
		sender_id: str,
		recipient_id: str,
		amount: int,
		operation_id: str,
		message: str | None = None,
	) -> dict:
		if not sender_id or not recipient_id or not amount or not operation_id:
			raise ValidationError("Missing parameters.")
		if sender_id == recipient_id:
			raise ValidationError("Cannot gift coins to yourself.")

		try:
			async with unit_of_work(self.session):
				# Перевіряємо ідемпотентність
				is_duplicate, existing_tx = await check_idempotency(
					self.session,
					operation_id=operation_id,
					expected_type=TransactionType.GIFT_SENT.value,
				)
				if is_duplicate and existing_tx is not None:
					# ключ повторно використано для іншого переказу
					if (
						existing_tx.user_id != sender_id
						or existing_tx.related_id != recipient_id
						or -existing_tx.amount != amount
					):
						raise DuplicateOperation(
							f"Operation ID '{operation_id}' already used for a different gift.",
							details={"operation_id": operation_id},
						)
					# Повертаємо той самий результат, що був раніше
					logger.warning(f"Found duplicate gift operation '{operation_id}'")
					return {
						"success": True,
						"duplicate": True,
						"sender_id": existing_tx.user_id,
						"recipient_id": existing_tx.related_id,
						"amount": -existing_tx.amount,
						"sender_balance": existing_tx.balance_after,
						"operation_id": operation_id,
					}

				await self.balances.ensure_user(recipient_id)
				await self.balances.ensure_user(sender_id)
				await self.balances.lock_balances([sender_id, recipient_id])

				sent = await self.balances.debit(
					sender_id,
					amount,
					TransactionType.GIFT_SENT,
					related_id=recipient_id,
					description=message or f"Gifted {amount} coins to user {recipient_id}",
					operation_id=operation_id,
				)
				await self.balances.credit(
					recipient_id,
					amount,
					TransactionType.GIFT_RECEIVED,
					related_id=sender_id,
					description=f"Received {amount} coins from user {sender_id}",
					operation_id=f"{operation_id}:received",
				)
		except IntegrityError as exc:
			# паралельний запит з тим самим operation_id встиг першим
			raise DuplicateOperation(
				f"Operation ID '{operation_id}' is already being processed."
			) from exc

		return {
			"success": True,
			"duplicate": False,
			"sender_id": sender_id,
			"recipient_id": recipient_id,
			"amount": amount,
			"sender_balance": sent.balance_after,
			"operation_id": operation_id,
		}
