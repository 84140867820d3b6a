import asyncio

import pytest

from coin_ledger.core.exceptions import (
	InsufficientFunds, UserNotFound, ValidationError
)
from coin_ledger.core.database import unit_of_work
from coin_ledger.models import TransactionType
from coin_ledger.services.balance import BalanceService


@pytest.mark.asyncio
async def test_new_user_balance_is_zero(make_user, balance_of):
	await make_user("u1")
	assert await balance_of("u1") == 0


@pytest.mark.asyncio
async def test_get_balance_unknown_user(db):
	async with db() as session:
		with pytest.raises(UserNotFound):
			await BalanceService(session).get_balance("ghost")


@pytest.mark.asyncio
async def test_credit_then_debit(db, make_user, balance_of):
	await make_user("u1")

	async with db() as session:
		async with unit_of_work(session):
			service = BalanceService(session)
			tx_in = await service.credit("u1", 500, TransactionType.REFUND, "wd_1")
			tx_out = await service.debit("u1", 200, TransactionType.PURCHASE, "course-1")

	assert tx_in.amount == 500
	assert tx_in.balance_after == 500
	# мінус = списання
	assert tx_out.amount == -200
	assert tx_out.balance_after == 300
	assert await balance_of("u1") == 300


@pytest.mark.asyncio
async def test_debit_insufficient_funds_changes_nothing(db, make_user, balance_of):
	await make_user("u1", coins=100)

	async with db() as session:
		with pytest.raises(InsufficientFunds):
			async with unit_of_work(session):
				await BalanceService(session).debit(
					"u1", 101, TransactionType.PURCHASE, "course-1"
				)

	assert await balance_of("u1") == 100
	async with db() as session:
		total, _ = await BalanceService(session).list_transactions("u1")
	# лише seed транзакція
	assert total == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, -5])
async def test_non_positive_amount_rejected(db, make_user, amount):
	await make_user("u1", coins=100)

	async with db() as session:
		with pytest.raises(ValidationError):
			await BalanceService(session).debit("u1", amount, TransactionType.PURCHASE)


@pytest.mark.asyncio
async def test_credit_unknown_user(db):
	async with db() as session:
		with pytest.raises(UserNotFound):
			await BalanceService(session).credit("ghost", 10, TransactionType.REFUND)


@pytest.mark.asyncio
async def test_balance_never_negative_and_reconciles(db, make_user, balance_of):
	await make_user("u1", coins=50)

	operations = [
		("debit", 30), ("debit", 30), ("credit", 15),
		("debit", 35), ("debit", 1), ("credit", 7), ("debit", 7),
	]
	for kind, amount in operations:
		async with db() as session:
			try:
				async with unit_of_work(session):
					service = BalanceService(session)
					if kind == "debit":
						await service.debit("u1", amount, TransactionType.PURCHASE)
					else:
						await service.credit("u1", amount, TransactionType.REFUND)
			except InsufficientFunds:
				pass
		assert await balance_of("u1") >= 0

	async with db() as session:
		report = await BalanceService(session).reconcile("u1")
	assert report["consistent"] is True
	assert report["balance"] == report["ledger_sum"] == 0


@pytest.mark.asyncio
async def test_concurrent_debits_only_one_succeeds(db, make_user, balance_of):
	await make_user("u1", coins=1000)

	async def attempt():
		async with db() as session:
			async with unit_of_work(session):
				return await BalanceService(session).debit(
					"u1", 800, TransactionType.PURCHASE
				)

	results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)

	succeeded = [r for r in results if not isinstance(r, Exception)]
	failed = [r for r in results if isinstance(r, Exception)]
	assert len(succeeded) == 1
	assert len(failed) == 1
	assert isinstance(failed[0], InsufficientFunds)
	assert await balance_of("u1") == 200


@pytest.mark.asyncio
async def test_list_transactions_newest_first(db, make_user):
	await make_user("u1", coins=100)

	async with db() as session:
		async with unit_of_work(session):
			await BalanceService(session).debit("u1", 40, TransactionType.PURCHASE, "c1")

	async with db() as session:
		total, transactions = await BalanceService(session).list_transactions("u1")

	assert total == 2
	assert [tx.amount for tx in transactions] == [-40, 100]
