from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, field_serializer

from coin_ledger.models import WithdrawalStatus


class CashoutRequest(BaseModel):
	# поля необов'язкові: відсутність перевіряє сервіс (MissingParameters)
	user_id: Optional[str] = None
	amount_coins: Optional[int] = None
	payment_method: Optional[str] = None
	payment_details: Optional[dict[str, Any]] = None


class WithdrawalOut(BaseModel):
	id: str
	user_id: str
	amount_coins: int
	amount_cash: Decimal
	conversion_rate: int
	payment_method: str
	payment_details: dict[str, Any]
	status: WithdrawalStatus
	processed_by: Optional[str] = None
	created_at: datetime
	processed_at: Optional[datetime] = None

	model_config = ConfigDict(
		from_attributes=True,
		use_enum_values=True
	)

	@field_serializer("amount_cash")
	def format_amount(self, v: Decimal, _info):
		return float(round(v, 2))  # 2 знаки після крапки


class CashoutResponse(BaseModel):
	success: bool = True
	withdrawal: WithdrawalOut


class ResolveWithdrawalRequest(BaseModel):
	action: str  # "approve" | "reject"


class ResolveWithdrawalResponse(BaseModel):
	success: bool = True
	withdrawal: WithdrawalOut


class WithdrawalPaginatedList(BaseModel):
	total: int
	limit: int
	offset: int
	withdrawals: List[WithdrawalOut]
