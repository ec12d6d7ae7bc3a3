# cart_service/db/functions.py
import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from cart_service.db.models import Cart, CartItem, Product, User, utcnow
from cart_service.exceptions import (
    CartEmpty,
    CartItemNotFound,
    CartNotFound,
    InsufficientStock,
    PersistenceFailure,
    ProductNotFound,
    UserNotFound,
)

logger = logging.getLogger(__name__)


async def get_user_by_id(db: AsyncSession, user_id: int):
    result = await db.execute(select(User).filter(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise UserNotFound(user_id)
    return user


async def get_product_by_id(db: AsyncSession, product_id: int):
    result = await db.execute(
        select(Product)
        .filter(Product.id == product_id)
        .options(selectinload(Product.category))
    )
    product = result.scalar_one_or_none()
    if not product:
        raise ProductNotFound(product_id)
    return product


def validate_stock(product: Product, requested_quantity: int) -> None:
    """Проверка запрошенного количества против текущего остатка товара.

    Сравнивается только приращение этого запроса, без учёта того, что уже лежит
    в корзине, и без списания остатка.
    """
    if requested_quantity > product.stock_quantity:
        raise InsufficientStock(available=product.stock_quantity, requested=requested_quantity)


async def get_cart_with_relations(db: AsyncSession, user_id: int = None, cart_id: int = None):
    """
    Получить корзину вместе с товарами, их продуктами и категориями и владельцем.

    Единственный путь чтения корзины: items всегда загружен (пустой список, если
    товаров нет), а populate_existing перечитывает объекты, уже лежащие в сессии.
    """
    query = (
        select(Cart)
        .options(
            selectinload(Cart.items).selectinload(CartItem.product).selectinload(Product.category),
            selectinload(Cart.user),
        )
        .execution_options(populate_existing=True)
    )
    if cart_id is not None:
        query = query.where(Cart.id == cart_id)
    else:
        query = query.where(Cart.user_id == user_id)
    result = await db.execute(query)
    return result.scalar_one_or_none()


# Получение (или создание при первом обращении) корзины пользователя
async def get_or_create_cart(db: AsyncSession, user_id: int):
    await get_user_by_id(db, user_id)

    cart = await get_cart_with_relations(db, user_id=user_id)
    if cart:
        return cart

    # Без commit: транзакцию фиксирует вызывающая операция
    db.add(Cart(user_id=user_id))
    await db.flush()
    logger.info("Created cart for user %s", user_id)

    # Свежесозданную корзину отдаём только после перечитывания со связями
    cart = await get_cart_with_relations(db, user_id=user_id)
    if not cart:
        raise PersistenceFailure(f"Failed to create cart for user {user_id}")
    return cart


# Добавление товара в корзину
async def add_item(db: AsyncSession, cart: Cart, product: Product, quantity: int):
    existing = next((item for item in cart.items if item.product_id == product.id), None)

    if existing:
        # Увеличиваем количество на стороне БД, чтобы параллельные добавления не терялись
        await db.execute(
            update(CartItem)
            .where(CartItem.id == existing.id)
            .values(quantity=CartItem.quantity + quantity, updated_at=utcnow())
        )
        logger.info(
            "Merged product %s into cart item %s (cart %s, +%s)", product.id, existing.id, cart.id, quantity
        )
    else:
        new_item = CartItem(cart_id=cart.id, product=product, quantity=quantity)
        db.add(new_item)
        cart.items.append(new_item)
        logger.info("Added product %s to cart %s (quantity %s)", product.id, cart.id, quantity)

    cart.updated_at = utcnow()
    await db.commit()

    return await get_cart_with_relations(db, cart_id=cart.id)


# Удаление товара из корзины
async def remove_item(db: AsyncSession, user_id: int, cart_item_id: int):
    await get_user_by_id(db, user_id)

    cart = await get_cart_with_relations(db, user_id=user_id)
    if not cart:
        raise CartNotFound(user_id)

    if not cart.items:
        raise CartEmpty(user_id)

    # Ищем только среди товаров корзины этого пользователя
    cart_item = next((item for item in cart.items if item.id == cart_item_id), None)
    if not cart_item:
        raise CartItemNotFound(cart_item_id)

    await db.delete(cart_item)
    cart.items.remove(cart_item)
    cart.updated_at = utcnow()
    await db.commit()
    logger.info("Removed cart item %s from cart %s", cart_item_id, cart.id)

    return await get_cart_with_relations(db, cart_id=cart.id)
