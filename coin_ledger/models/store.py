from sqlalchemy import (
	Column, Integer, String, Boolean, DateTime, ForeignKey, CheckConstraint, func
)

from coin_ledger.core.database import Base
from coin_ledger.utils.common import utc_now

# stock_quantity = -1 - необмежений запас
UNLIMITED_STOCK = -1


class StoreItem(Base):
	__tablename__ = "store_items"
	__table_args__ = (
		CheckConstraint("price > 0", name="ck_store_items_price_positive"),
		CheckConstraint("stock_quantity >= -1", name="ck_store_items_stock"),
	)

	id = Column(String, primary_key=True)
	name = Column(String, nullable=False)
	price = Column(Integer, nullable=False)  # у coins
	stock_quantity = Column(Integer, nullable=False, default=UNLIMITED_STOCK)
	is_active = Column(Boolean, nullable=False, default=True)
	updated_at = Column(
		DateTime(timezone=True), default=utc_now, onupdate=utc_now,
		server_default=func.now()
	)


class StorePurchase(Base):
	__tablename__ = "store_purchases"

	id = Column(String, primary_key=True)
	user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
	item_id = Column(String, ForeignKey("store_items.id"), nullable=False)
	quantity = Column(Integer, nullable=False)
	total_cost = Column(Integer, nullable=False)
	created_at = Column(
		DateTime(timezone=True), default=utc_now, server_default=func.now()
	)
