from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict, computed_field


class TransactionDetail(BaseModel):
	id: str
	type: str
	created_at: datetime = Field(exclude=True)
	amount: int
	balance_after: int
	related_id: Optional[str] = None
	description: Optional[str] = None
	operation_id: Optional[str] = None

	@computed_field
	@property
	def date(self) -> datetime:
		return self.created_at

	model_config = ConfigDict(
		from_attributes=True,
		use_enum_values=True
	)


class TransactionPaginatedList(BaseModel):
	user_id: str
	total: int
	limit: int
	offset: int
	transactions: List[TransactionDetail]
