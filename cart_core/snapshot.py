import json
from decimal import InvalidOperation
from typing import Optional

from .discounts import BuyXGetYFree, DiscountStrategy, PercentageDiscount
from .domain import Cart, CartItem
from .errors import CartError, SnapshotError

VERSION = 1


# ============ Cart -> dict ============


def strategy_to_dict(strategy: Optional[DiscountStrategy]) -> Optional[dict]:
    if isinstance(strategy, PercentageDiscount):
        return {"type": "percentage", "percentage": str(strategy.percentage)}
    if isinstance(strategy, BuyXGetYFree):
        return {
            "type": "buy_x_get_y",
            "buy_quantity": strategy.buy_quantity,
            "free_quantity": strategy.free_quantity,
        }
    return None


def to_dict(cart: Cart) -> dict:
    """Снимок корзины из простых типов (цены строками, чтобы Decimal не терял точность)"""
    return {
        "version": VERSION,
        "items": [
            {
                "product_id": item.product_id,
                "unit_price": str(item.unit_price),
                "quantity": item.quantity,
            }
            for item in cart.get_items()
        ],
        "discount": strategy_to_dict(cart.get_discount_strategy()),
    }


# ============ dict -> Cart ============


def strategy_from_dict(data: Optional[dict]) -> Optional[DiscountStrategy]:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise SnapshotError(f"Malformed discount in snapshot: {data!r}")
    kind = data.get("type")
    if kind == "percentage":
        return PercentageDiscount(data["percentage"])
    if kind == "buy_x_get_y":
        return BuyXGetYFree(data["buy_quantity"], data["free_quantity"])
    raise SnapshotError(f"Unknown discount type in snapshot: {kind!r}")


def from_dict(data: dict) -> Cart:
    """
    Восстанавливает корзину из снимка.
    Валидация конструкторов выполняется заново; битые данные -> SnapshotError
    """
    if not isinstance(data, dict) or data.get("version") != VERSION:
        raise SnapshotError("Unsupported cart snapshot")

    def _to_item(raw: dict) -> CartItem:
        return CartItem(
            product_id=str(raw["product_id"]),
            unit_price=raw["unit_price"],
            quantity=raw["quantity"],
        )

    try:
        items = tuple(map(_to_item, data.get("items", [])))
        strategy = strategy_from_dict(data.get("discount"))
    except SnapshotError:
        raise
    except (CartError, KeyError, TypeError, ValueError, InvalidOperation) as exc:
        raise SnapshotError(f"Malformed cart snapshot: {exc}") from exc

    cart = Cart()
    for item in items:
        cart.add_item(item)
    cart.set_discount_strategy(strategy)
    return cart


# ============ JSON ============


def dumps(cart: Cart) -> str:
    return json.dumps(to_dict(cart), ensure_ascii=False)


def loads(text: str) -> Cart:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"Cart snapshot is not valid JSON: {exc}") from exc
    return from_dict(data)
