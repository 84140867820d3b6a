from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRegisterResponse(BaseModel):
	success: bool = True
	user_id: str
	created: bool


class CourseUpsert(BaseModel):
	title: str
	price: Decimal = Field(..., ge=0)


class CourseOut(BaseModel):
	id: str
	title: str
	price: float
	price_coins: Optional[int] = None

	class Config:
		from_attributes = True


class CompleteCourseRequest(BaseModel):
	user_id: str
	course_id: str


class CourseCompletionOut(BaseModel):
	user_id: str
	course_id: str
	completed_at: datetime

	model_config = ConfigDict(from_attributes=True)


class CompleteCourseResponse(BaseModel):
	success: bool = True
	created: bool
	data: CourseCompletionOut
