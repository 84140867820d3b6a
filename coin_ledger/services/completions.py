import logging
from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from coin_ledger.core.config import config
from coin_ledger.core.database import unit_of_work
from coin_ledger.core.exceptions import CourseNotFound, ValidationError
from coin_ledger.models import Course, CourseCompletion, TransactionType
from coin_ledger.services.balance import BalanceService
from coin_ledger.utils.common import utc_now
from coin_ledger.utils.sql import insert_or_ignore

logger = logging.getLogger("[LEDGER]")


class CompletionService:
	def __init__(self, session: AsyncSession, reward_coins: int | None = None):
		self.session = session
		self.balances = BalanceService(session)
		self.reward_coins = (
			config.COMPLETION_REWARD_COINS if reward_coins is None else reward_coins
		)

	async def record_completion(
		self, user_id: str, course_id: str
	) -> Tuple[CourseCompletion, bool]:
		"""
		Idempotent upsert по (user_id, course_id).
		Повертає (completion, created). Нагорода нараховується лише коли created.
		"""
		if not user_id or not course_id:
			raise ValidationError("Missing user_id or course_id.")

		async with unit_of_work(self.session):
			await self.balances.ensure_user(user_id)
			course = await self.session.get(Course, course_id)
			if not course:
				raise CourseNotFound(f"Course '{course_id}' not found.")

			result = await self.session.execute(
				insert_or_ignore(
					self.session, CourseCompletion,
					user_id=user_id,
					course_id=course_id,
					completed_at=utc_now(),
				).returning(CourseCompletion.user_id)
			)
			created = result.scalar_one_or_none() is not None

			if created and self.reward_coins > 0:
				await self.balances.credit(
					user_id,
					self.reward_coins,
					TransactionType.COMPLETION_REWARD,
					related_id=course_id,
					description=f"Reward for completing course '{course.title}'",
				)

			completion = await self.session.get(
				CourseCompletion, (user_id, course_id), populate_existing=True
			)

		if created:
			logger.info(f"Course '{course_id}' completed by '{user_id}'")
		return completion, created
