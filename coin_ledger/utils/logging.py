from coin_ledger.utils.common import generate_id


def get_extra_data_log(obj: object) -> dict:
	return {
		column.name: getattr(obj, column.name)
		for column in obj.__table__.columns
	}


def generate_admin_log_id(operation_type: str) -> str:
	# беремо перші літери кожного слова
	prefix = "".join(word[0] for word in operation_type.split("_"))
	return generate_id(prefix)
