from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from uuid import uuid4

from coin_ledger.core.config import config


def utc_now() -> datetime:
	return datetime.now(timezone.utc)


def generate_id(prefix: str) -> str:
	# txn_..., wd_..., enr_... - префікс показує тип сутності
	return f"{prefix}_{uuid4().hex}"


def generate_transaction_id() -> str:
	return generate_id("txn")


def calculate_cash_amount(amount_coins: int, rate: int) -> Decimal:
	"""coins -> гроші, 2 знаки після крапки"""
	return (Decimal(amount_coins) / Decimal(rate)).quantize(
		Decimal("0.01"), rounding=ROUND_HALF_UP
	)


def calculate_coin_price(price) -> Optional[int]:
	"""
	Ціна курсу у coins. Оплата coins доступна лише для курсів
	з ціною в межах [COIN_PRICE_MIN, COIN_PRICE_MAX], інакше None.
	"""
	if price is None:
		return None
	price = Decimal(str(price))
	if price < config.COIN_PRICE_MIN or price > config.COIN_PRICE_MAX:
		return None
	return int(
		(price * config.COINS_PER_PRICE_UNIT).to_integral_value(rounding=ROUND_HALF_UP)
	)
