from typing import Optional

from pydantic_settings import BaseSettings


class AppConfig(BaseSettings):
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "coin_ledger"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: str = "5432"

    # повний URL (наприклад sqlite+aiosqlite:///... для тестів)
    DB_URL: Optional[str] = None

    ADMIN_TOKEN: str
    SERVICE_TOKEN: str

    DEBUG_MODE: bool = False
    LOG_DIR: str = "logs"

    # курс конвертації: скільки coins за 1 одиницю валюти
    COIN_TO_CASH_RATE: int = 1000
    MIN_CASHOUT_COINS: int = 1000

    # ціна курсу у coins = price * COINS_PER_PRICE_UNIT
    COINS_PER_PRICE_UNIT: int = 100
    COIN_PRICE_MIN: int = 1
    COIN_PRICE_MAX: int = 10000

    # 0 - нагорода за завершення курсу вимкнена
    COMPLETION_REWARD_COINS: int = 0
    ACTIVITY_REWARD_COINS: int = 10
    # 1000 coins рефереру за кожного запрошеного користувача
    REFERRAL_REWARD_COINS: int = 1000

    @property
    def DATABASE_URL(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    class Config:
        env_file = ".env"


config = AppConfig()
