import enum
from sqlalchemy import (
	Column, String, DateTime, JSON, Enum as AlchemyEnum, func
)

from coin_ledger.core.database import Base
from coin_ledger.utils.common import utc_now


# AdminLog модель зберігає зміни, що зроблено Admin у DB
class AdminOperationType(enum.Enum):
	APPROVE_WITHDRAWAL = "approve_withdrawal"
	REJECT_WITHDRAWAL = "reject_withdrawal"


class AdminLog(Base):
	__tablename__ = "admin_log"

	id = Column(String, primary_key=True)
	operation_type = Column(AlchemyEnum(AdminOperationType), nullable=False)
	admin_id = Column(String, nullable=True)
	entity = Column(String, nullable=False)  # object: "WithdrawalRequest", ...
	entity_id = Column(String, nullable=True)  # object_id: ID (якщо є)
	changes = Column(JSON, nullable=False)  # {"field": "status", "old": "pending", "new": "approved"}
	created_at = Column(
		DateTime(timezone=True), default=utc_now, server_default=func.now()
	)
