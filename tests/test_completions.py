import pytest
from decimal import Decimal
from sqlalchemy import select, func

from coin_ledger.core.exceptions import CourseNotFound, UserNotFound
from coin_ledger.models import CourseCompletion, Transaction, TransactionType
from coin_ledger.services.completions import CompletionService


async def complete(db, user_id, course_id, reward_coins=None):
	async with db() as session:
		return await CompletionService(
			session, reward_coins=reward_coins
		).record_completion(user_id, course_id)


@pytest.mark.asyncio
async def test_completion_is_idempotent(db, make_user, make_course):
	await make_user("u1")
	await make_course("course-1", Decimal("10.00"))

	first, created_first = await complete(db, "u1", "course-1")
	second, created_second = await complete(db, "u1", "course-1")

	assert created_first is True
	assert created_second is False
	# повторний виклик повертає той самий запис
	assert first.completed_at == second.completed_at

	async with db() as session:
		count = await session.scalar(
			select(func.count()).select_from(CourseCompletion)
		)
	assert count == 1


@pytest.mark.asyncio
async def test_completion_without_reward_does_not_touch_balance(db, make_user, make_course, balance_of):
	await make_user("u1", coins=100)
	await make_course("course-1", Decimal("10.00"))

	await complete(db, "u1", "course-1", reward_coins=0)
	assert await balance_of("u1") == 100


@pytest.mark.asyncio
async def test_completion_reward_credited_once(db, make_user, make_course, balance_of):
	await make_user("u1")
	await make_course("course-1", Decimal("10.00"))

	await complete(db, "u1", "course-1", reward_coins=50)
	await complete(db, "u1", "course-1", reward_coins=50)

	assert await balance_of("u1") == 50
	async with db() as session:
		result = await session.execute(
			select(Transaction).where(
				Transaction.type == TransactionType.COMPLETION_REWARD
			)
		)
		rewards = result.scalars().all()
	assert len(rewards) == 1
	assert rewards[0].related_id == "course-1"


@pytest.mark.asyncio
async def test_completion_unknown_course(db, make_user):
	await make_user("u1")

	with pytest.raises(CourseNotFound):
		await complete(db, "u1", "missing")


@pytest.mark.asyncio
async def test_completion_unknown_user(db, make_course):
	await make_course("course-1", Decimal("10.00"))

	with pytest.raises(UserNotFound):
		await complete(db, "ghost", "course-1")
