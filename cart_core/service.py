from decimal import Decimal, InvalidOperation

import structlog

from .discounts import (
    BuyXGetYFree,
    PercentageDiscount,
    describe_discount,
    format_percentage,
)
from .domain import Cart, CartItem
from .errors import CartError
from .ftypes import Either, Maybe
from .money import to_decimal

log = structlog.get_logger(__name__)

DISCOUNT_NONE = "none"
DISCOUNT_PERCENTAGE = "percentage"
DISCOUNT_BUY_X_GET_Y = "buy_x_get_y"

DISCOUNT_TYPES = (DISCOUNT_NONE, DISCOUNT_PERCENTAGE, DISCOUNT_BUY_X_GET_Y)


def _fail(op: str, message: str) -> Either[dict, str]:
    log.warning("cart.rejected", op=op, error=message)
    return Either.left({"error": message})


def _parse_decimal(raw, label: str) -> Decimal:
    try:
        value = to_decimal(raw if raw is not None else "")
    except (InvalidOperation, ValueError) as exc:
        raise CartError(f"Invalid {label}: {raw!r}") from exc
    if not value.is_finite():
        raise CartError(f"Invalid {label}: {raw!r}")
    return value


def _parse_int(raw, label: str) -> int:
    # 2.5 не округляется молча до 2
    if isinstance(raw, float) and not raw.is_integer():
        raise CartError(f"Invalid {label}: {raw!r}")
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise CartError(f"Invalid {label}: {raw!r}") from exc


class CartService:
    """
    Фасад над корзиной сессии: принимает сырые значения полей формы,
    вызывает ядро и возвращает Either[{"error": ...}, сообщение].
    Корзиной владеет вызывающий код; неудачный вызов её не меняет.
    """

    def __init__(self, cart: Cart):
        self.cart = cart

    # ============ Мутации ============

    def add_item(self, product_id, unit_price, quantity) -> Either[dict, str]:
        pid = (product_id or "").strip()
        if not pid:
            return _fail("add_item", "Product ID is required")
        try:
            item = CartItem(
                pid,
                _parse_decimal(unit_price, "price"),
                _parse_int(quantity, "quantity"),
            )
        except CartError as exc:
            return _fail("add_item", str(exc))

        self.cart.add_item(item)
        log.info(
            "cart.item_added",
            product_id=pid,
            quantity=item.quantity,
            item_quantity=self.cart.get_item(pid).quantity,
        )
        return Either.right(f"Added {item.quantity} x {pid} to cart")

    def remove_item(self, product_id: str) -> Either[dict, str]:
        if not self.cart.remove_item(product_id):
            return _fail("remove_item", "Item not found in cart")
        log.info("cart.item_removed", product_id=product_id)
        return Either.right(f"Removed {product_id} from cart")

    def clear(self) -> Either[dict, str]:
        self.cart.clear()
        log.info("cart.cleared")
        return Either.right("Cart cleared")

    def apply_discount(
        self,
        discount_type: str,
        percentage=None,
        buy_x=None,
        get_y=None,
    ) -> Either[dict, str]:
        """
        Устанавливает скидку по типу из формы: none | percentage | buy_x_get_y.
        При ошибке валидации активная скидка не меняется.
        """
        try:
            if discount_type == DISCOUNT_NONE:
                strategy = None
                message = "Discount removed"
            elif discount_type == DISCOUNT_PERCENTAGE:
                strategy = PercentageDiscount(_parse_decimal(percentage, "percentage"))
                message = f"Applied {format_percentage(strategy.percentage)}% discount"
            elif discount_type == DISCOUNT_BUY_X_GET_Y:
                strategy = BuyXGetYFree(
                    _parse_int(buy_x, "buy quantity"),
                    _parse_int(get_y, "free quantity"),
                )
                message = f"Applied {describe_discount(strategy)} discount"
            else:
                return _fail("apply_discount", f"Unknown discount type: {discount_type}")
        except CartError as exc:
            return _fail("apply_discount", str(exc))

        self.cart.set_discount_strategy(strategy)
        log.info("cart.discount_set", discount=describe_discount(strategy))
        return Either.right(message)

    # ============ Чтение ============

    def safe_item(self, product_id: str) -> Maybe[CartItem]:
        """Безопасный поиск позиции по product_id"""
        found = self.cart.get_item(product_id)
        return Maybe.some(found) if found is not None else Maybe.nothing()

    def discount_info(self) -> str:
        return describe_discount(self.cart.get_discount_strategy())

    def summary(self) -> dict:
        """Всё, что отображает страница корзины"""
        return {
            "items": self.cart.get_items(),
            "item_count": self.cart.get_item_count(),
            "is_empty": self.cart.is_empty(),
            "subtotal": self.cart.get_subtotal(),
            "discount": self.cart.get_discount_amount(),
            "discount_info": self.discount_info(),
            "total": self.cart.get_total(),
        }
