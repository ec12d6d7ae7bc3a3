# cart_service/exceptions.py
# Типизированные ошибки движка корзины. HTTP-коды назначаются в main.py.


class CartServiceError(Exception):
    """Базовая ошибка сервиса корзины."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def extra(self) -> dict:
        return {}


class NotFound(CartServiceError):
    entity = "Entity"

    def __init__(self, identifier):
        super().__init__(f"{self.entity} with ID {identifier} not found")
        self.identifier = identifier


class UserNotFound(NotFound):
    entity = "User"


class ProductNotFound(NotFound):
    entity = "Product"


class CartNotFound(NotFound):
    entity = "Cart"

    def __init__(self, user_id):
        CartServiceError.__init__(self, f"Cart for user {user_id} not found")
        self.identifier = user_id


class CartItemNotFound(NotFound):
    entity = "Cart item"


class InsufficientStock(CartServiceError):
    def __init__(self, available: int, requested: int):
        super().__init__(f"Not enough stock available. Available: {available}, requested: {requested}")
        self.available = available
        self.requested = requested

    def extra(self) -> dict:
        return {"available": self.available, "requested": self.requested}


class CartEmpty(CartServiceError):
    def __init__(self, user_id):
        super().__init__("Cart is empty")
        self.user_id = user_id


class InvalidQuantity(CartServiceError):
    def __init__(self, quantity):
        super().__init__(f"Quantity must be a positive integer, got {quantity!r}")
        self.quantity = quantity


class PersistenceFailure(CartServiceError):
    """Сбой хранилища: потеря соединения, нарушение ограничения и т.п."""
