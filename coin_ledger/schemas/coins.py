from typing import Optional

from pydantic import BaseModel, Field


# **************    Balance
class CoinsBalanceResponse(BaseModel):
	user_id: str
	coins: int


class ReconciliationResponse(BaseModel):
	user_id: str
	balance: int
	ledger_sum: int
	consistent: bool


# **************    Pay with coins
class PayWithCoinsRequest(BaseModel):
	user_id: str
	course_id: str


class PayWithCoinsResponse(BaseModel):
	success: bool = True
	enrollment_id: str
	course_id: str
	price_coins: int
	balance_after: int


# **************    Activity reward
class ActivityRewardRequest(BaseModel):
	user_id: str
	course_id: str
	action_type: str


class ActivityRewardResponse(BaseModel):
	awarded: bool
	coins: int
	balance: int
	message: str


# **************    Gift
class GiftRequest(BaseModel):
	sender_id: str
	recipient_id: str
	amount: int = Field(..., gt=0)
	operation_id: str
	message: Optional[str] = None


class GiftResponse(BaseModel):
	success: bool = True
	duplicate: bool = False
	sender_id: str
	recipient_id: str
	amount: int
	sender_balance: int
	operation_id: str


# **************    Referral reward
class ReferralRewardRequest(BaseModel):
	referrer_id: str
	referred_user_id: str
	course_id: Optional[str] = None


class ReferralRewardResponse(BaseModel):
	awarded: bool
	coins: int
	balance: int
	message: str
