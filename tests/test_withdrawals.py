import asyncio
from decimal import Decimal

import pytest
from sqlalchemy import select

from coin_ledger.core.dependencies import Caller
from coin_ledger.core.exceptions import (
	AlreadyProcessed, BelowMinimum, Forbidden, InsufficientFunds,
	MissingParameters, ValidationError, WithdrawalNotFound
)
from coin_ledger.models import (
	AdminLog, Transaction, TransactionType, WithdrawalRequest, WithdrawalStatus
)
from coin_ledger.services.balance import BalanceService
from coin_ledger.services.withdrawals import WithdrawalService

ADMIN = Caller(id="admin-1", is_admin=True)
BANK_DETAILS = {"account_number": "0123456789", "bank": "Test Bank"}


async def cashout(
	db, user_id, amount_coins, method="bank", details=BANK_DETAILS, min_cashout_coins=None
):
	async with db() as session:
		return await WithdrawalService(
			session, min_cashout_coins=min_cashout_coins
		).request_cashout(
			user_id, amount_coins, method, details
		)


async def resolve(db, withdrawal_id, action, caller=ADMIN):
	async with db() as session:
		return await WithdrawalService(session).resolve(caller, withdrawal_id, action)


async def withdrawals_count(db) -> int:
	async with db() as session:
		result = await session.execute(select(WithdrawalRequest))
		return len(result.scalars().all())


@pytest.mark.asyncio
@pytest.mark.parametrize(
	"amount, method, details",
	[
		(None, "bank", BANK_DETAILS),
		(1000, None, BANK_DETAILS),
		(1000, "bank", None),
		(1000, "", BANK_DETAILS),
	],
)
async def test_cashout_missing_parameters(db, make_user, amount, method, details):
	await make_user("u1", coins=5000)

	with pytest.raises(MissingParameters):
		await cashout(db, "u1", amount, method, details)
	assert await withdrawals_count(db) == 0


@pytest.mark.asyncio
async def test_cashout_below_minimum_checked_before_balance(db, make_user, balance_of):
	# баланс 0: все одно очікуємо BelowMinimum, а не InsufficientFunds
	await make_user("u1")

	with pytest.raises(BelowMinimum):
		await cashout(db, "u1", 999)
	assert await balance_of("u1") == 0


@pytest.mark.asyncio
async def test_cashout_insufficient_funds(db, make_user, balance_of):
	await make_user("u1", coins=1500)

	with pytest.raises(InsufficientFunds):
		await cashout(db, "u1", 2000)
	assert await balance_of("u1") == 1500
	assert await withdrawals_count(db) == 0


@pytest.mark.asyncio
async def test_cashout_creates_pending_withdrawal_and_debits(db, make_user, balance_of):
	await make_user("u1", coins=5000)

	withdrawal = await cashout(db, "u1", 5000)

	assert withdrawal.status == WithdrawalStatus.PENDING
	assert withdrawal.amount_coins == 5000
	assert withdrawal.amount_cash == Decimal("5.00")
	assert withdrawal.conversion_rate == 1000
	assert withdrawal.payment_details == BANK_DETAILS
	assert withdrawal.processed_at is None
	assert await balance_of("u1") == 0

	async with db() as session:
		result = await session.execute(
			select(Transaction).where(Transaction.related_id == withdrawal.id)
		)
		tx = result.scalar_one()
	assert tx.type == TransactionType.CASHOUT_REQUEST
	assert tx.amount == -5000


@pytest.mark.asyncio
async def test_amount_cash_frozen_at_request_time(db, make_user):
	await make_user("u1", coins=3000)

	async with db() as session:
		withdrawal = await WithdrawalService(
			session, conversion_rate=1000
		).request_cashout("u1", 2500, "bank", BANK_DETAILS)

	# інший курс при вирішенні заявки не впливає на суму
	async with db() as session:
		resolved = await WithdrawalService(
			session, conversion_rate=500
		).resolve(ADMIN, withdrawal.id, "approve")

	assert resolved.amount_cash == Decimal("2.50")
	assert resolved.conversion_rate == 1000


@pytest.mark.asyncio
async def test_reject_refunds_exactly(db, make_user, balance_of):
	await make_user("u1", coins=5000)
	before = await balance_of("u1")

	withdrawal = await cashout(db, "u1", 5000)
	assert await balance_of("u1") == 0

	resolved = await resolve(db, withdrawal.id, "reject")

	assert resolved.status == WithdrawalStatus.REJECTED
	assert resolved.processed_at is not None
	assert resolved.processed_by == ADMIN.id
	assert await balance_of("u1") == before

	async with db() as session:
		report = await BalanceService(session).reconcile("u1")
	assert report["consistent"] is True


@pytest.mark.asyncio
async def test_approve_keeps_coins_debited(db, make_user, balance_of):
	await make_user("u1", coins=2000)

	withdrawal = await cashout(db, "u1", 2000)
	resolved = await resolve(db, withdrawal.id, "approve")

	assert resolved.status == WithdrawalStatus.APPROVED
	assert await balance_of("u1") == 0

	async with db() as session:
		result = await session.execute(
			select(Transaction).where(Transaction.type == TransactionType.REFUND)
		)
		assert result.scalars().all() == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
	"first, second",
	[("reject", "reject"), ("reject", "approve"), ("approve", "reject")],
)
async def test_second_resolution_is_already_processed(db, make_user, balance_of, first, second):
	await make_user("u1", coins=3000)
	withdrawal = await cashout(db, "u1", 3000)

	done = await resolve(db, withdrawal.id, first)
	balance_after_first = await balance_of("u1")

	with pytest.raises(AlreadyProcessed):
		await resolve(db, withdrawal.id, second)

	assert await balance_of("u1") == balance_after_first
	async with db() as session:
		stored = await WithdrawalService(session).get(withdrawal.id)
	assert stored.status == done.status
	assert stored.processed_by == ADMIN.id


@pytest.mark.asyncio
async def test_resolve_requires_admin(db, make_user, balance_of):
	await make_user("u1", coins=1000)
	withdrawal = await cashout(db, "u1", 1000)

	with pytest.raises(Forbidden):
		await resolve(db, withdrawal.id, "reject", caller=Caller(id="u1"))

	async with db() as session:
		stored = await WithdrawalService(session).get(withdrawal.id)
	assert stored.status == WithdrawalStatus.PENDING
	assert await balance_of("u1") == 0


@pytest.mark.asyncio
async def test_resolve_unknown_withdrawal(db):
	with pytest.raises(WithdrawalNotFound):
		await resolve(db, "wd_missing", "approve")


@pytest.mark.asyncio
async def test_resolve_invalid_action(db, make_user):
	await make_user("u1", coins=1000)
	withdrawal = await cashout(db, "u1", 1000)

	with pytest.raises(ValidationError):
		await resolve(db, withdrawal.id, "cancel")


@pytest.mark.asyncio
async def test_resolution_writes_admin_log(db, make_user):
	await make_user("u1", coins=1000)
	withdrawal = await cashout(db, "u1", 1000)
	await resolve(db, withdrawal.id, "reject")

	async with db() as session:
		result = await session.execute(select(AdminLog))
		logs = result.scalars().all()

	assert len(logs) == 1
	assert logs[0].entity_id == withdrawal.id
	assert logs[0].admin_id == ADMIN.id
	assert logs[0].changes["new"] == "rejected"


@pytest.mark.asyncio
async def test_concurrent_cashouts_only_one_succeeds(db, make_user, balance_of):
	await make_user("u1", coins=1000)

	# мінімум 500: обидві заявки проходять валідацію і змагаються за списання
	results = await asyncio.gather(
		cashout(db, "u1", 800, min_cashout_coins=500),
		cashout(db, "u1", 800, min_cashout_coins=500),
		return_exceptions=True,
	)

	created = [r for r in results if isinstance(r, WithdrawalRequest)]
	failed = [r for r in results if isinstance(r, Exception)]
	assert len(created) == 1
	assert len(failed) == 1
	assert isinstance(failed[0], InsufficientFunds)
	assert await balance_of("u1") == 200
	assert await withdrawals_count(db) == 1


@pytest.mark.asyncio
async def test_full_settlement_scenario(db, make_user, balance_of):
	await make_user("u1", coins=5000)

	first = await cashout(db, "u1", 5000, "bank", {"iban": "NG00TEST"})
	assert first.amount_cash == Decimal("5.00")
	assert first.status == WithdrawalStatus.PENDING
	assert await balance_of("u1") == 0

	rejected = await resolve(db, first.id, "reject")
	assert rejected.status == WithdrawalStatus.REJECTED
	assert await balance_of("u1") == 5000

	second = await cashout(db, "u1", 2000)
	assert await balance_of("u1") == 3000

	approved = await resolve(db, second.id, "approve")
	assert approved.status == WithdrawalStatus.APPROVED
	assert await balance_of("u1") == 3000

	async with db() as session:
		total, pending = await WithdrawalService(session).list_withdrawals(
			status=WithdrawalStatus.PENDING
		)
		report = await BalanceService(session).reconcile("u1")
	assert total == 0
	assert pending == []
	assert report["consistent"] is True
