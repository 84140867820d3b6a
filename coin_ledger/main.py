from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from coin_ledger.core.exceptions import (
    LedgerError, ledger_exception_handler, request_validation_exception_handler
)
from coin_ledger.core.logging_config import setup_logging
from coin_ledger.routers.admin import admin_router
from coin_ledger.routers.internal import internal_router

setup_logging()


app = FastAPI(
    title="Coin Ledger",
    description="Сервіс балансу coins: оплата курсів, нагороди, виведення коштів",
    version="1.0.0"
)

app.add_exception_handler(LedgerError, ledger_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(internal_router)
app.include_router(admin_router)
