# cart_service/config.py
# Настройки сервиса корзины из переменных окружения (.env подхватывается python-dotenv).
import os

from dotenv import load_dotenv

load_dotenv()


def _build_database_url() -> str:
    url = os.getenv("CART_DATABASE_URL")
    if url:
        return url
    return (
        f"postgresql+asyncpg://{os.getenv('CART_DB_USER', 'cart')}:{os.getenv('CART_DB_PASSWORD', 'cart')}"
        f"@{os.getenv('CART_DB_HOST', 'localhost')}:{os.getenv('CART_DB_PORT', '5432')}/{os.getenv('CART_DB_NAME', 'cart')}"
    )


class Settings:
    """Основные настройки сервиса."""

    DATABASE_URL: str = _build_database_url()
    DB_ECHO: bool = os.getenv("CART_DB_ECHO", "false").lower() in ("1", "true", "yes")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Через запятую; "*" разрешает всё (для разработки)
    CORS_ORIGINS: list[str] = [
        origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
    ]


settings = Settings()
