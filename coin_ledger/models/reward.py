from sqlalchemy import (
	Column, Integer, String, Date, DateTime, ForeignKey, UniqueConstraint, func
)

from coin_ledger.core.database import Base
from coin_ledger.utils.common import utc_now


class ActivityReward(Base):
	"""Нагорода за дію в курсі: не частіше одного разу на день для кожного action_type."""
	__tablename__ = "activity_rewards"
	__table_args__ = (
		UniqueConstraint(
			"user_id", "action_type", "reward_date",
			name="uq_activity_rewards_user_action_day"
		),
	)

	id = Column(String, primary_key=True)
	user_id = Column(String, ForeignKey("users.id"), nullable=False)
	course_id = Column(String, nullable=False)
	action_type = Column(String(32), nullable=False)
	reward_date = Column(Date, nullable=False)
	coins = Column(Integer, nullable=False)
	created_at = Column(
		DateTime(timezone=True), default=utc_now, server_default=func.now()
	)
