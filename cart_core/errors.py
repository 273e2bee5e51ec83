from decimal import Decimal


class CartError(ValueError):
    """Базовая ошибка корзины (ошибки ввода, не временные сбои)"""


class InvalidPrice(CartError):
    def __init__(self, price: Decimal):
        self.price = price
        super().__init__(f"Invalid price: {price:.2f}. Price must be non-negative.")


class InvalidQuantity(CartError):
    def __init__(self, quantity: int):
        self.quantity = quantity
        super().__init__(f"Invalid quantity: {quantity}. Quantity must be positive.")


class InvalidDiscount(CartError):
    pass


class SnapshotError(CartError):
    """Снимок корзины повреждён или имеет неизвестный формат"""
