import enum

from sqlalchemy import (
    Column, Integer, String, ForeignKey, DateTime, Enum, func
)
from sqlalchemy.orm import relationship

from coin_ledger.core.database import Base
from coin_ledger.utils.common import utc_now


class TransactionType(enum.Enum):
    PURCHASE = "purchase"                    # оплата курсу coins
    CASHOUT_REQUEST = "cashout_request"      # заявка на виведення
    REFUND = "refund"                        # повернення при відхиленні
    COMPLETION_REWARD = "completion_reward"  # нагорода за завершення курсу
    ACTIVITY_REWARD = "activity_reward"      # нагорода за активність у курсі
    GIFT_SENT = "gift_sent"                  # подарунок: списання
    GIFT_RECEIVED = "gift_received"          # подарунок: нарахування
    REFERRAL_REWARD = "referral_reward"      # нагорода рефереру
    STORE_PURCHASE = "store_purchase"        # покупка в магазині


class Transaction(Base):
    """Append-only журнал: рядки не змінюються і не видаляються."""
    __tablename__ = "coin_transactions"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)

    type = Column(Enum(TransactionType), nullable=False)
    amount = Column(Integer, nullable=False)  # + або -, мінус = списання
    balance_after = Column(Integer, nullable=False)

    related_id = Column(String, nullable=True)  # withdrawal / course id
    description = Column(String, nullable=True)
    operation_id = Column(String, unique=True, nullable=True)  # для ідемпотентності
    created_at = Column(
        DateTime(timezone=True), default=utc_now, server_default=func.now()
    )

    user = relationship("User", back_populates="transactions")
