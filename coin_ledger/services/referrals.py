import logging

from sqlalchemy.ext.asyncio import AsyncSession

from coin_ledger.core.config import config
from coin_ledger.core.database import unit_of_work
from coin_ledger.core.exceptions import ValidationError
from coin_ledger.models import ReferralEvent, TransactionType
from coin_ledger.services.balance import BalanceService
from coin_ledger.utils.common import generate_id, utc_now
from coin_ledger.utils.sql import insert_or_ignore

logger = logging.getLogger("[LEDGER]")


class ReferralService:
	"""Нагорода рефереру: рівно один раз на кожного запрошеного користувача."""

	def __init__(self, session: AsyncSession, reward_coins: int | None = None):
		self.session = session
		self.balances = BalanceService(session)
		self.reward_coins = (
			config.REFERRAL_REWARD_COINS if reward_coins is None else reward_coins
		)

	async def award_referral(
		self, referrer_id: str, referred_user_id: str, course_id: str | None = None
	) -> dict:
		if not referrer_id or not referred_user_id:
			raise ValidationError("Missing referrer_id or referred_user_id.")
		if referrer_id == referred_user_id:
			raise ValidationError("User cannot refer themselves.")
		if self.reward_coins <= 0:
			raise ValidationError("Referral rewards are disabled.")

		async with unit_of_work(self.session):
			await self.balances.ensure_user(referred_user_id)
			await self.balances.ensure_user(referrer_id)

			# унікальний referred_user_id: друга спроба нічого не вставляє
			result = await self.session.execute(
				insert_or_ignore(
					self.session, ReferralEvent,
					id=generate_id("ref"),
					referrer_id=referrer_id,
					referred_user_id=referred_user_id,
					course_id=course_id,
					coins_awarded=self.reward_coins,
					created_at=utc_now(),
				).returning(ReferralEvent.id)
			)
			if result.scalar_one_or_none() is None:
				balance = await self.balances.get_balance(referrer_id)
				return {
					"awarded": False,
					"coins": 0,
					"balance": balance,
					"message": "Referral reward already granted.",
				}

			tx = await self.balances.credit(
				referrer_id,
				self.reward_coins,
				TransactionType.REFERRAL_REWARD,
				related_id=referred_user_id,
				description=f"Referral reward for inviting user {referred_user_id}",
			)

		logger.info(f"Referral reward granted to '{referrer_id}' for '{referred_user_id}'")
		return {
			"awarded": True,
			"coins": self.reward_coins,
			"balance": tx.balance_after,
			"message": "Referral reward granted!",
		}
