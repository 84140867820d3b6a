import enum

from sqlalchemy import (
	Column, Integer, String, Numeric, DateTime, ForeignKey, JSON, Enum, func
)

from coin_ledger.core.database import Base
from coin_ledger.utils.common import utc_now


class WithdrawalStatus(enum.Enum):
	PENDING = "pending"
	APPROVED = "approved"
	REJECTED = "rejected"


class WithdrawalRequest(Base):
	"""
	Заявка на виведення coins у гроші.
	pending -> approved | rejected, рівно один раз.
	"""
	__tablename__ = "withdrawal_requests"

	id = Column(String, primary_key=True)
	user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
	amount_coins = Column(Integer, nullable=False)
	# фіксується при створенні заявки, не перераховується
	amount_cash = Column(Numeric(12, 2), nullable=False)
	conversion_rate = Column(Integer, nullable=False)
	payment_method = Column(String, nullable=False)
	payment_details = Column(JSON, nullable=False)  # opaque payload
	status = Column(
		Enum(WithdrawalStatus), nullable=False,
		default=WithdrawalStatus.PENDING, index=True
	)
	processed_by = Column(String, nullable=True)
	created_at = Column(
		DateTime(timezone=True), default=utc_now, server_default=func.now()
	)
	processed_at = Column(DateTime(timezone=True), nullable=True)
