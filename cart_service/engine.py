# cart_service/engine.py
import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cart_service.db import functions
from cart_service.exceptions import CartServiceError, InvalidQuantity, PersistenceFailure

logger = logging.getLogger(__name__)


class CartEngine:
    """
    Три операции над корзиной для слоя обработки запросов.

    Сессия передаётся явно, один экземпляр на запрос. Все проверки выполняются
    до первой записи; сбой хранилища откатывает сессию и поднимается как
    PersistenceFailure.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _unit_of_work(self, operation: str):
        try:
            yield
        except PersistenceFailure:
            await self.db.rollback()
            logger.error("%s failed in the persistence layer", operation, exc_info=True)
            raise
        except CartServiceError as exc:
            logger.warning("%s rejected: %s", operation, exc.message)
            raise
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("%s failed in the persistence layer", operation, exc_info=True)
            raise PersistenceFailure(f"{operation} failed: {exc.__class__.__name__}") from exc

    async def fetch_or_create_cart(self, user_id: int):
        """Корзина пользователя; создаётся при первом чтении."""
        async with self._unit_of_work("fetch_cart"):
            cart = await functions.get_or_create_cart(self.db, user_id)
            await self.db.commit()
            return cart

    fetch_cart = fetch_or_create_cart

    async def add_to_cart(self, user_id: int, product_id: int, quantity: int):
        async with self._unit_of_work("add_to_cart"):
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                raise InvalidQuantity(quantity)

            await functions.get_user_by_id(self.db, user_id)
            product = await functions.get_product_by_id(self.db, product_id)
            functions.validate_stock(product, quantity)

            cart = await functions.get_or_create_cart(self.db, user_id)
            return await functions.add_item(self.db, cart, product, quantity)

    async def remove_from_cart(self, user_id: int, cart_item_id: int):
        async with self._unit_of_work("remove_from_cart"):
            return await functions.remove_item(self.db, user_id, cart_item_id)
