from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Union

from .errors import InvalidDiscount
from .money import ZERO, Number, to_decimal

if TYPE_CHECKING:
    from .domain import Cart

HUNDRED = Decimal("100")


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


# ============ Варианты скидок (иммутабельные значения) ============


@dataclass(frozen=True)
class PercentageDiscount:
    """Процент от подытога всей корзины, percentage в [0, 100]"""

    percentage: Decimal

    def __init__(self, percentage: Number):
        value = to_decimal(percentage)
        if not value.is_finite() or value < 0 or value > HUNDRED:
            raise InvalidDiscount(
                f"Invalid percentage: {value:.2f}. "
                "Percentage must be between 0 and 100."
            )
        object.__setattr__(self, "percentage", value)

    def apply(self, cart: Cart) -> Decimal:
        return cart.get_subtotal() * self.percentage / HUNDRED


@dataclass(frozen=True)
class BuyXGetYFree:
    """
    "Купи X — получи Y бесплатно", считается по каждому товару отдельно.

    Полный набор = buy_quantity + free_quantity единиц одного товара
    и даёт free_quantity бесплатных единиц. Остаток, дотянувший до
    buy_quantity, даёт только реально имеющийся излишек (не больше free_quantity).

    Пример (2, 1): qty=3 -> 1 бесплатная, qty=4 -> 1, qty=9 -> 3, qty=1 -> 0
    """

    buy_quantity: int
    free_quantity: int

    def __init__(self, buy_quantity: int, free_quantity: int):
        if not _is_positive_int(buy_quantity):
            raise InvalidDiscount(
                f"Invalid buy quantity: {buy_quantity}. Buy quantity must be positive."
            )
        if not _is_positive_int(free_quantity):
            raise InvalidDiscount(
                f"Invalid free quantity: {free_quantity}. Free quantity must be positive."
            )
        object.__setattr__(self, "buy_quantity", buy_quantity)
        object.__setattr__(self, "free_quantity", free_quantity)

    @property
    def set_size(self) -> int:
        return self.buy_quantity + self.free_quantity

    def free_units(self, quantity: int) -> int:
        """Сколько единиц из quantity достаётся бесплатно"""
        sets, remainder = divmod(quantity, self.set_size)
        extra = 0
        if remainder >= self.buy_quantity:
            extra = min(self.free_quantity, remainder - self.buy_quantity)
        return sets * self.free_quantity + extra

    def apply(self, cart: Cart) -> Decimal:
        return sum(
            (self.free_units(item.quantity) * item.unit_price for item in cart.get_items()),
            ZERO,
        )


DiscountStrategy = Union[PercentageDiscount, BuyXGetYFree]


# ============ Диспетчеризация ============


def apply_discount(strategy: Optional[DiscountStrategy], cart: Cart) -> Decimal:
    """Сумма скидки для корзины; без стратегии скидка нулевая"""
    if strategy is None:
        return ZERO
    return strategy.apply(cart)


def describe_discount(strategy: Optional[DiscountStrategy]) -> str:
    """Человекочитаемое описание активной скидки"""
    if isinstance(strategy, PercentageDiscount):
        return f"{format_percentage(strategy.percentage)}% off"
    if isinstance(strategy, BuyXGetYFree):
        return f"Buy {strategy.buy_quantity} Get {strategy.free_quantity} Free"
    return "No discount"


def format_percentage(value: Decimal) -> str:
    # 20.0 -> "20", 12.50 -> "12.5"
    text = format(value, "f")
    return text.rstrip("0").rstrip(".") if "." in text else text
