from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base

from coin_ledger.core.config import config
from coin_ledger.core.exceptions import StorageFailure


IS_SQLITE = config.DATABASE_URL.startswith("sqlite")

engine = create_async_engine(
	config.DATABASE_URL,
	echo=config.DEBUG_MODE,  # echo=True для debug (!)
	connect_args={"timeout": 30} if IS_SQLITE else {},
)
async_session = sessionmaker(
	bind=engine,
	expire_on_commit=False,
	class_=AsyncSession
)

Base = declarative_base()


if IS_SQLITE:
	# SQLite: вимикаємо власний BEGIN драйвера і відкриваємо транзакцію як
	# BEGIN IMMEDIATE, щоб writer-и серіалізувались на рівні БД
	@event.listens_for(engine.sync_engine, "connect")
	def _sqlite_connect(dbapi_connection, connection_record):
		dbapi_connection.isolation_level = None

	@event.listens_for(engine.sync_engine, "begin")
	def _sqlite_begin(conn):
		conn.exec_driver_sql("BEGIN IMMEDIATE")


@asynccontextmanager
async def unit_of_work(session: AsyncSession):
	"""
	Одна атомарна одиниця роботи: commit при успіху, rollback при будь-якій помилці.
	Помилки з'єднання з БД перетворюються на StorageFailure.
	"""
	try:
		yield session
		await session.commit()
	except (OperationalError, InterfaceError) as exc:
		await session.rollback()
		raise StorageFailure(str(exc.orig or exc)) from exc
	except Exception:
		await session.rollback()
		raise
