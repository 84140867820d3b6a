from sqlalchemy import (
	Column, Integer, String, DateTime, ForeignKey, CheckConstraint, func
)
from sqlalchemy.orm import relationship

from coin_ledger.core.database import Base
from coin_ledger.utils.common import utc_now


class UserBalance(Base):
	__tablename__ = "user_balances"
	__table_args__ = (
		CheckConstraint("coins >= 0", name="ck_user_balances_coins_non_negative"),
	)

	user_id = Column(String, ForeignKey("users.id"), primary_key=True)
	coins = Column(Integer, nullable=False, default=0)  # поточний баланс
	updated_at = Column(
		DateTime(timezone=True), default=utc_now, onupdate=utc_now,
		server_default=func.now()
	)

	user = relationship("User", back_populates="balance")
