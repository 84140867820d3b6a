import logging

from sqlalchemy import case, or_, update
from sqlalchemy.ext.asyncio import AsyncSession

from coin_ledger.core.database import unit_of_work
from coin_ledger.core.exceptions import (
	InsufficientStock, ItemNotFound, ValidationError
)
from coin_ledger.models import (
	StoreItem, StorePurchase, TransactionType, UNLIMITED_STOCK
)
from coin_ledger.services.balance import BalanceService
from coin_ledger.utils.common import generate_id, utc_now

logger = logging.getLogger("[LEDGER]")


class StoreService:
	"""
	Покупка товару з магазину за coins.

	Списання запасу і списання coins - в одній транзакції:
	якщо coins не вистачає, запас повертається разом з rollback.
	"""

	def __init__(self, session: AsyncSession):
		self.session = session
		self.balances = BalanceService(session)

	async def purchase_item(self, user_id: str, item_id: str, quantity: int = 1) -> dict:
		if not user_id or not item_id:
			raise ValidationError("Missing user_id or item_id.")
		if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
			raise ValidationError("Quantity must be a positive integer.")

		async with unit_of_work(self.session):
			await self.balances.ensure_user(user_id)

			# умовне списання запасу: -1 лишається -1, інакше stock >= quantity
			result = await self.session.execute(
				update(StoreItem)
				.where(
					StoreItem.id == item_id,
					StoreItem.is_active.is_(True),
					or_(
						StoreItem.stock_quantity == UNLIMITED_STOCK,
						StoreItem.stock_quantity >= quantity,
					),
				)
				.values(
					stock_quantity=case(
						(StoreItem.stock_quantity == UNLIMITED_STOCK, UNLIMITED_STOCK),
						else_=StoreItem.stock_quantity - quantity,
					),
					updated_at=utc_now(),
				)
				.returning(StoreItem.price, StoreItem.stock_quantity, StoreItem.name)
				.execution_options(synchronize_session=False)
			)
			row = result.first()
			if row is None:
				item = await self.session.get(StoreItem, item_id)
				if item is None or not item.is_active:
					raise ItemNotFound(f"Store item '{item_id}' not found.")
				raise InsufficientStock(
					f"Only {item.stock_quantity} of '{item.name}' left.",
					details={"available": item.stock_quantity, "requested": quantity},
				)

			total_cost = row.price * quantity
			purchase_id = generate_id("sp")
			tx = await self.balances.debit(
				user_id,
				total_cost,
				TransactionType.STORE_PURCHASE,
				related_id=item_id,
				description=f"Purchased {quantity} x '{row.name}'",
			)
			self.session.add(StorePurchase(
				id=purchase_id,
				user_id=user_id,
				item_id=item_id,
				quantity=quantity,
				total_cost=total_cost,
				created_at=utc_now(),
			))
			await self.session.flush()

		logger.info(f"Store item '{item_id}' x{quantity} purchased by '{user_id}'")
		return {
			"success": True,
			"purchase_id": purchase_id,
			"item_id": item_id,
			"quantity": quantity,
			"total_cost": total_cost,
			"balance_after": tx.balance_after,
			"stock_remaining": (
				None if row.stock_quantity == UNLIMITED_STOCK else row.stock_quantity
			),
		}
