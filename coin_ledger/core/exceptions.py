from typing import Any

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class LedgerError(Exception):
	"""Базова помилка ledger: message + стабільний code + HTTP статус."""

	code = "LEDGER_ERROR"
	status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
	default_message = "Ledger error."

	def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
		self.message = message or self.default_message
		self.details = details or {}
		super().__init__(self.message)


# **************    Validation (без побічних ефектів)
class ValidationError(LedgerError):
	code = "VALIDATION_ERROR"
	status_code = status.HTTP_400_BAD_REQUEST
	default_message = "Invalid request."


class MissingParameters(ValidationError):
	code = "MISSING_PARAMETERS"
	default_message = "Missing parameters."


class BelowMinimum(ValidationError):
	code = "BELOW_MINIMUM"
	default_message = "Amount is below the minimum."


class InsufficientFunds(LedgerError):
	code = "INSUFFICIENT_FUNDS"
	status_code = status.HTTP_402_PAYMENT_REQUIRED
	default_message = "Insufficient coins."


# **************    Not found
class NotFoundError(LedgerError):
	code = "NOT_FOUND"
	status_code = status.HTTP_404_NOT_FOUND
	default_message = "Not found."


class UserNotFound(NotFoundError):
	code = "USER_NOT_FOUND"
	default_message = "User not found."


class CourseNotFound(NotFoundError):
	code = "COURSE_NOT_FOUND"
	default_message = "Course not found."


class WithdrawalNotFound(NotFoundError):
	code = "WITHDRAWAL_NOT_FOUND"
	default_message = "Withdrawal request not found."


class ItemNotFound(NotFoundError):
	code = "ITEM_NOT_FOUND"
	default_message = "Store item not found."


# **************    Idempotency conflicts
class ConflictError(LedgerError):
	code = "CONFLICT"
	status_code = status.HTTP_409_CONFLICT
	default_message = "Conflict."


class AlreadyProcessed(ConflictError):
	code = "ALREADY_PROCESSED"
	default_message = "Already processed."


class AlreadyEnrolled(ConflictError):
	code = "ALREADY_ENROLLED"
	default_message = "Already enrolled."


class DuplicateOperation(ConflictError):
	code = "DUPLICATE_OPERATION"
	default_message = "Operation ID already used for different operation type."


class InsufficientStock(ConflictError):
	code = "INSUFFICIENT_STOCK"
	default_message = "Insufficient stock."


class Forbidden(LedgerError):
	code = "FORBIDDEN"
	status_code = status.HTTP_403_FORBIDDEN
	default_message = "Forbidden."


class StorageFailure(LedgerError):
	"""Єдиний клас помилок, який клієнт може повторити."""

	code = "STORAGE_FAILURE"
	status_code = status.HTTP_503_SERVICE_UNAVAILABLE
	default_message = "Storage unavailable."


async def ledger_exception_handler(request: Request, exc: LedgerError) -> JSONResponse:
	body = {
		"success": False,
		"error": exc.message,
		"code": exc.code,
	}
	if exc.details:
		body["details"] = exc.details
	return JSONResponse(status_code=exc.status_code, content=body)


async def request_validation_exception_handler(
	request: Request, exc: RequestValidationError
) -> JSONResponse:
	# помилки схем pydantic - у тому самому форматі, що й ValidationError
	return await ledger_exception_handler(
		request,
		ValidationError(
			"Invalid request body.",
			details={"errors": jsonable_encoder(exc.errors())},
		),
	)
