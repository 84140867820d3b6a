# В main.py або окремому скрипті
import asyncio

from coin_ledger.core.database import engine, Base
import coin_ledger.models  # noqa: F401  реєструє всі таблиці у Base.metadata


async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Викликати при старті
if __name__ == "__main__":
    asyncio.run(init_db())
