from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Optional, Tuple

from .discounts import DiscountStrategy, apply_discount
from .errors import InvalidPrice, InvalidQuantity
from .money import ZERO, to_decimal


def _check_quantity(quantity) -> None:
    """Количество: только int (bool не считается), строго больше нуля"""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantity(quantity)


@dataclass
class CartItem:
    """
    Позиция корзины: товар, цена за единицу, количество.
    Меняется только количество (через set_quantity).
    """

    product_id: str
    unit_price: Decimal
    quantity: int

    def __post_init__(self):
        price = to_decimal(self.unit_price)
        # NaN и Infinity отсекаются до сравнения
        if not price.is_finite() or price < 0:
            raise InvalidPrice(price)
        _check_quantity(self.quantity)
        self.unit_price = price

    def set_quantity(self, quantity: int) -> None:
        _check_quantity(quantity)
        self.quantity = quantity

    def total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class Cart:
    """
    Корзина сессии: позиции по product_id (в порядке добавления)
    и не более одной активной скидки.
    Владеет корзиной вызывающий код (session state), глобального экземпляра нет.
    """

    # dict хранит порядок вставки: он же уникальный ключ и порядок отображения
    _items: Dict[str, CartItem] = field(default_factory=dict)
    _discount: Optional[DiscountStrategy] = None

    # ============ Мутации ============

    def add_item(self, item: CartItem) -> None:
        """Добавляет позицию; повторный product_id суммирует количество"""
        existing = self._items.get(item.product_id)
        if existing is None:
            self._items[item.product_id] = item
        else:
            # цена остаётся от первой позиции
            existing.set_quantity(existing.quantity + item.quantity)

    def remove_item(self, product_id: str) -> bool:
        return self._items.pop(product_id, None) is not None

    def clear(self) -> None:
        """Очищает позиции. Скидка при этом сохраняется"""
        self._items.clear()

    def set_discount_strategy(self, strategy: Optional[DiscountStrategy]) -> None:
        self._discount = strategy

    # ============ Чтение ============

    def get_item(self, product_id: str) -> Optional[CartItem]:
        return self._items.get(product_id)

    def get_items(self) -> Tuple[CartItem, ...]:
        return tuple(self._items.values())

    def get_discount_strategy(self) -> Optional[DiscountStrategy]:
        return self._discount

    def is_empty(self) -> bool:
        return not self._items

    def get_item_count(self) -> int:
        return sum(item.quantity for item in self._items.values())

    def get_subtotal(self) -> Decimal:
        return sum((item.total() for item in self._items.values()), ZERO)

    def get_discount_amount(self) -> Decimal:
        if self._discount is None or self.is_empty():
            return ZERO
        return apply_discount(self._discount, self)

    def get_total(self) -> Decimal:
        return max(ZERO, self.get_subtotal() - self.get_discount_amount())
