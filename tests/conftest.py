import os
import sys
import tempfile
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

# тестова БД і логи - у тимчасовій директорії (до імпорту coin_ledger)
_TMP_DIR = tempfile.mkdtemp(prefix="coin_ledger_tests_")
os.environ.setdefault("DB_URL", f"sqlite+aiosqlite:///{_TMP_DIR}/test.db")
os.environ.setdefault("LOG_DIR", os.path.join(_TMP_DIR, "logs"))
os.environ.setdefault("ADMIN_TOKEN", "test-admin-token")
os.environ.setdefault("SERVICE_TOKEN", "test-service-token")

import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from coin_ledger.core.database import Base, engine, async_session
from coin_ledger.models import Course, TransactionType, User
from coin_ledger.services.balance import BalanceService


@pytest_asyncio.fixture
async def db():
	async with engine.begin() as conn:
		await conn.run_sync(Base.metadata.create_all)

	yield async_session  # Тест виконується тут

	# Cleanup після тесту
	async with engine.begin() as conn:
		await conn.run_sync(Base.metadata.drop_all)
	await engine.dispose()  # з'єднання прив'язані до event loop тесту


@pytest_asyncio.fixture
async def make_user(db):
	async def _make_user(user_id: str, coins: int = 0) -> str:
		async with db() as session:
			session.add(User(id=user_id))
			await session.flush()
			if coins:
				await BalanceService(session).credit(
					user_id, coins, TransactionType.ACTIVITY_REWARD,
					description="test seed"
				)
			await session.commit()
		return user_id

	return _make_user


@pytest_asyncio.fixture
async def make_course(db):
	async def _make_course(course_id: str, price, title: str = "Test course") -> str:
		async with db() as session:
			session.add(Course(id=course_id, title=title, price=price))
			await session.commit()
		return course_id

	return _make_course


@pytest_asyncio.fixture
async def balance_of(db):
	async def _balance_of(user_id: str) -> int:
		async with db() as session:
			return await BalanceService(session).get_balance(user_id)

	return _balance_of


@pytest_asyncio.fixture
async def async_client(db):
	from coin_ledger.main import app

	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://test") as client:
		yield client
