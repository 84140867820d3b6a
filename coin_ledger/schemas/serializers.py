from coin_ledger.models import Transaction
from coin_ledger.schemas.transactions import TransactionDetail


def serialize_transaction(tx: Transaction) -> TransactionDetail:
    tx_dict = {
        "id": tx.id,
        "type": tx.type.value,
        "created_at": tx.created_at,
        "amount": tx.amount,
        "balance_after": tx.balance_after,
        "related_id": tx.related_id,
        "description": tx.description,
        "operation_id": tx.operation_id,
    }
    return TransactionDetail.model_validate(tx_dict)
