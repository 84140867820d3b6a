import logging
import json
import os

from coin_ledger.core.config import config
from coin_ledger.models import Transaction, WithdrawalRequest
from coin_ledger.models.admin_log import AdminLog

# logging coins (transactions + withdrawals)
LEDGER_FIELDS = (
    {c.name for c in Transaction.__table__.columns}
    | {c.name for c in WithdrawalRequest.__table__.columns}
)
# admin logging
ADMIN_FIELDS = {c.name for c in AdminLog.__table__.columns}


class ModelFormatter(logging.Formatter):
    def __init__(self, fmt=None, fields=None):
        super().__init__(fmt)
        self.fields = fields or set()

    def format(self, record):
        base = super().format(record)
        extras = {k: v for k, v in record.__dict__.items() if k in self.fields}
        if extras:
            base += " " + json.dumps(extras, default=str, ensure_ascii=False)
        return base


def _file_logger(name: str, filename: str, formatter: logging.Formatter):
    handler = logging.FileHandler(os.path.join(config.LOG_DIR, filename))
    handler.setFormatter(formatter)
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    # повторний виклик setup_logging не дублює handler-и
    if not any(
        isinstance(h, logging.FileHandler) and h.baseFilename == handler.baseFilename
        for h in logger.handlers
    ):
        logger.addHandler(handler)
    else:
        handler.close()


# setup
def setup_logging():
    os.makedirs(config.LOG_DIR, exist_ok=True)

    formatter_ledger = ModelFormatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        fields=LEDGER_FIELDS
    )

    formatter_admin = ModelFormatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        fields=ADMIN_FIELDS
    )

    # LEDGER: рух coins
    _file_logger("[LEDGER]", "ledger.log", formatter_ledger)

    # INTERNAL API
    _file_logger("[INTERNAL]", "internal.log", formatter_ledger)

    # ADMIN
    _file_logger("[ADMIN]", "admin.log", formatter_admin)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
