import pytest
from decimal import Decimal
from sqlalchemy import select

from coin_ledger.core.exceptions import (
	AlreadyEnrolled, CourseNotFound, InsufficientFunds, UserNotFound, ValidationError
)
from coin_ledger.models import Enrollment, Transaction, TransactionType
from coin_ledger.services.purchases import PurchaseService


async def pay(db, user_id, course_id):
	async with db() as session:
		return await PurchaseService(session).pay_with_coins(user_id, course_id)


async def enrollments_of(db, user_id):
	async with db() as session:
		result = await session.execute(
			select(Enrollment).where(Enrollment.user_id == user_id)
		)
		return result.scalars().all()


@pytest.mark.asyncio
async def test_pay_with_coins(db, make_user, make_course, balance_of):
	await make_user("u1", coins=1500)
	await make_course("course-1", Decimal("10.00"))

	result = await pay(db, "u1", "course-1")

	# 10.00 * 100 = 1000 coins
	assert result["success"] is True
	assert result["price_coins"] == 1000
	assert result["balance_after"] == 500
	assert await balance_of("u1") == 500

	enrollments = await enrollments_of(db, "u1")
	assert len(enrollments) == 1
	assert enrollments[0].course_id == "course-1"
	assert enrollments[0].payment_method == "coins"

	async with db() as session:
		result = await session.execute(
			select(Transaction).where(Transaction.type == TransactionType.PURCHASE)
		)
		tx = result.scalar_one()
	assert tx.amount == -1000
	assert tx.related_id == "course-1"


@pytest.mark.asyncio
async def test_pay_twice_is_not_charged_twice(db, make_user, make_course, balance_of):
	await make_user("u1", coins=5000)
	await make_course("course-1", Decimal("10.00"))

	await pay(db, "u1", "course-1")
	with pytest.raises(AlreadyEnrolled):
		await pay(db, "u1", "course-1")

	assert await balance_of("u1") == 4000
	assert len(await enrollments_of(db, "u1")) == 1


@pytest.mark.asyncio
async def test_pay_insufficient_funds_leaves_no_enrollment(db, make_user, make_course, balance_of):
	await make_user("u1", coins=999)
	await make_course("course-1", Decimal("10.00"))

	with pytest.raises(InsufficientFunds):
		await pay(db, "u1", "course-1")

	# запис на курс відкочено разом зі списанням
	assert await enrollments_of(db, "u1") == []
	assert await balance_of("u1") == 999


@pytest.mark.asyncio
async def test_pay_unknown_course(db, make_user):
	await make_user("u1", coins=1000)

	with pytest.raises(CourseNotFound):
		await pay(db, "u1", "missing")


@pytest.mark.asyncio
async def test_pay_unknown_user(db, make_course):
	await make_course("course-1", Decimal("10.00"))

	with pytest.raises(UserNotFound):
		await pay(db, "ghost", "course-1")


@pytest.mark.asyncio
@pytest.mark.parametrize("price", [Decimal("0.00"), Decimal("0.50"), Decimal("10000.01")])
async def test_pay_price_outside_coin_range(db, make_user, make_course, balance_of, price):
	await make_user("u1", coins=10_000_000)
	await make_course("course-x", price)

	with pytest.raises(ValidationError):
		await pay(db, "u1", "course-x")
	assert await balance_of("u1") == 10_000_000
