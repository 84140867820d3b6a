from sqlalchemy import Column, String, DateTime, func
from sqlalchemy.orm import relationship

from coin_ledger.core.database import Base
from coin_ledger.utils.common import utc_now


class User(Base):
	"""Посилання на користувача з auth-сервісу (сам профіль живе там)."""
	__tablename__ = "users"

	id = Column(String, primary_key=True)
	created_at = Column(
		DateTime(timezone=True), default=utc_now, server_default=func.now()
	)

	balance = relationship("UserBalance", back_populates="user", uselist=False)
	transactions = relationship("Transaction", back_populates="user")
