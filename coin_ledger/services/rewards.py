import logging

from sqlalchemy.ext.asyncio import AsyncSession

from coin_ledger.core.config import config
from coin_ledger.core.database import unit_of_work
from coin_ledger.core.exceptions import ValidationError
from coin_ledger.models import ActivityReward, TransactionType
from coin_ledger.services.balance import BalanceService
from coin_ledger.utils.common import generate_id, utc_now
from coin_ledger.utils.sql import insert_or_ignore

logger = logging.getLogger("[LEDGER]")

REWARDED_ACTIONS = ("start", "continue", "open_active_course")


class ActivityRewardService:
	"""Coins за активність у курсі: один раз на день для кожного типу дії."""

	def __init__(self, session: AsyncSession, reward_coins: int | None = None):
		self.session = session
		self.balances = BalanceService(session)
		self.reward_coins = (
			config.ACTIVITY_REWARD_COINS if reward_coins is None else reward_coins
		)

	async def award(self, user_id: str, course_id: str, action_type: str) -> dict:
		if not user_id or not course_id or not action_type:
			raise ValidationError("Missing required fields.")
		if action_type not in REWARDED_ACTIONS:
			raise ValidationError(f"Invalid action type '{action_type}'.")
		if self.reward_coins <= 0:
			raise ValidationError("Activity rewards are disabled.")

		now = utc_now()
		async with unit_of_work(self.session):
			await self.balances.ensure_user(user_id)

			result = await self.session.execute(
				insert_or_ignore(
					self.session, ActivityReward,
					id=generate_id("act"),
					user_id=user_id,
					course_id=course_id,
					action_type=action_type,
					reward_date=now.date(),
					coins=self.reward_coins,
					created_at=now,
				).returning(ActivityReward.id)
			)
			reward_id = result.scalar_one_or_none()

			if reward_id is None:
				balance = await self.balances.get_balance(user_id)
				return {
					"awarded": False,
					"coins": 0,
					"balance": balance,
					"message": "Already rewarded for this action today.",
				}

			tx = await self.balances.credit(
				user_id,
				self.reward_coins,
				TransactionType.ACTIVITY_REWARD,
				related_id=course_id,
				description=f"Awarded for {action_type} on course {course_id}",
			)

		return {
			"awarded": True,
			"coins": self.reward_coins,
			"balance": tx.balance_after,
			"message": "Coins awarded!",
		}
