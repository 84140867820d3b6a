import logging

from sqlalchemy.ext.asyncio import AsyncSession

from coin_ledger.core.database import unit_of_work
from coin_ledger.core.exceptions import (
	AlreadyEnrolled, CourseNotFound, ValidationError
)
from coin_ledger.models import Course, Enrollment, TransactionType
from coin_ledger.services.balance import BalanceService
from coin_ledger.utils.common import calculate_coin_price, generate_id, utc_now
from coin_ledger.utils.sql import insert_or_ignore

logger = logging.getLogger("[LEDGER]")


class PurchaseService:
	"""Оплата курсу coins: запис на курс + списання в одній транзакції."""

	def __init__(self, session: AsyncSession):
		self.session = session
		self.balances = BalanceService(session)

	async def get_course(self, course_id: str) -> Course:
		course = await self.session.get(Course, course_id)
		if not course:
			raise CourseNotFound(f"Course '{course_id}' not found.")
		return course

	async def pay_with_coins(self, user_id: str, course_id: str) -> dict:
		if not user_id or not course_id:
			raise ValidationError("Missing user_id or course_id.")

		async with unit_of_work(self.session):
			await self.balances.ensure_user(user_id)
			course = await self.get_course(course_id)

			price_coins = calculate_coin_price(course.price)
			if price_coins is None:
				raise ValidationError(
					f"Course '{course_id}' cannot be paid with coins."
				)

			# запис на курс першим: повторна покупка не доходить до списання
			enrollment_id = generate_id("enr")
			result = await self.session.execute(
				insert_or_ignore(
					self.session, Enrollment,
					id=enrollment_id,
					user_id=user_id,
					course_id=course_id,
					payment_method="coins",
					created_at=utc_now(),
				).returning(Enrollment.id)
			)
			if result.scalar_one_or_none() is None:
				raise AlreadyEnrolled(
					f"User '{user_id}' is already enrolled in '{course_id}'."
				)

			tx = await self.balances.debit(
				user_id,
				price_coins,
				TransactionType.PURCHASE,
				related_id=course_id,
				description=f"Paid {price_coins} coins for course '{course.title}'",
			)

		logger.info(
			f"Course '{course_id}' purchased with coins by '{user_id}'",
		)
		return {
			"success": True,
			"enrollment_id": enrollment_id,
			"course_id": course_id,
			"price_coins": price_coins,
			"balance_after": tx.balance_after,
		}
