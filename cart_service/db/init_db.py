# cart_service/db/init_db.py
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from cart_service.db import models  # noqa: F401  регистрирует таблицы в Base.metadata
from cart_service.db.database import Base, engine as default_engine

logger = logging.getLogger(__name__)


async def init_db(engine: AsyncEngine | None = None):
    engine = engine or default_engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created (or already exist)")
