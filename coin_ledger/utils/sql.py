from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def insert_or_ignore(session: AsyncSession, model, **values):
	"""
	INSERT ... ON CONFLICT DO NOTHING для поточного діалекту.
	З .returning(...) повертає рядок лише якщо вставка реально відбулась.
	"""
	dialect = session.bind.dialect.name
	if dialect == "postgresql":
		stmt = postgresql.insert(model)
	elif dialect == "sqlite":
		stmt = sqlite.insert(model)
	else:
		raise NotImplementedError(f"insert_or_ignore: unsupported dialect '{dialect}'")
	return stmt.values(**values).on_conflict_do_nothing()
