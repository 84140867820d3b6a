from coin_ledger.models.user import User
from coin_ledger.models.balance import UserBalance
from coin_ledger.models.transaction import Transaction, TransactionType
from coin_ledger.models.withdrawal import WithdrawalRequest, WithdrawalStatus
from coin_ledger.models.course import Course, Enrollment, CourseCompletion
from coin_ledger.models.reward import ActivityReward
from coin_ledger.models.referral import ReferralEvent
from coin_ledger.models.store import StoreItem, StorePurchase, UNLIMITED_STOCK
from coin_ledger.models.admin_log import AdminLog, AdminOperationType

__all__ = [
	"User",
	"UserBalance",
	"Transaction",
	"TransactionType",
	"WithdrawalRequest",
	"WithdrawalStatus",
	"Course",
	"Enrollment",
	"CourseCompletion",
	"ActivityReward",
	"ReferralEvent",
	"StoreItem",
	"StorePurchase",
	"UNLIMITED_STOCK",
	"AdminLog",
	"AdminOperationType",
]
