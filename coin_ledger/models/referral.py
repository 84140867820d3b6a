from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func

from coin_ledger.core.database import Base
from coin_ledger.utils.common import utc_now


class ReferralEvent(Base):
	"""Нагорода рефереру: один запис на кожного запрошеного користувача."""
	__tablename__ = "referral_events"

	id = Column(String, primary_key=True)
	referrer_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
	referred_user_id = Column(
		String, ForeignKey("users.id"), nullable=False, unique=True
	)
	course_id = Column(String, nullable=True)
	coins_awarded = Column(Integer, nullable=False)
	created_at = Column(
		DateTime(timezone=True), default=utc_now, server_default=func.now()
	)
