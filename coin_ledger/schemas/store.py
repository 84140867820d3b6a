from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StoreItemUpsert(BaseModel):
	name: str
	price: int = Field(..., gt=0)  # у coins
	stock_quantity: int = Field(-1, ge=-1)  # -1 - необмежено
	is_active: bool = True


class StoreItemOut(BaseModel):
	id: str
	name: str
	price: int
	stock_quantity: int
	is_active: bool

	model_config = ConfigDict(from_attributes=True)


class StorePurchaseRequest(BaseModel):
	user_id: str
	item_id: str
	quantity: int = 1


class StorePurchaseResponse(BaseModel):
	success: bool = True
	purchase_id: str
	item_id: str
	quantity: int
	total_cost: int
	balance_after: int
	stock_remaining: Optional[int] = None
