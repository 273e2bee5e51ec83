import sys
import os
from decimal import Decimal

from structlog.testing import capture_logs

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from cart_core.discounts import BuyXGetYFree, PercentageDiscount
from cart_core.domain import Cart, CartItem
from cart_core.service import CartService


def make_service():
    return CartService(Cart())


def error_of(result):
    assert result.is_left
    return result.value["error"]


# ТЕСТЫ добавления


def test_add_item_success():
    svc = make_service()
    result = svc.add_item("  product-1 ", "10.50", "2")

    assert result.is_right
    assert result.get_or_else("") == "Added 2 x product-1 to cart"
    item = svc.cart.get_item("product-1")
    assert item.unit_price == Decimal("10.50")
    assert item.quantity == 2


def test_add_item_accepts_widget_numbers():
    svc = make_service()
    assert svc.add_item("p1", 10.1, 3).is_right
    assert svc.cart.get_subtotal() == Decimal("30.3")


def test_add_item_requires_product_id():
    svc = make_service()
    assert error_of(svc.add_item("   ", 10, 1)) == "Product ID is required"
    assert error_of(svc.add_item(None, 10, 1)) == "Product ID is required"
    assert svc.cart.is_empty()


def test_add_item_core_errors_surface_as_messages():
    svc = make_service()
    assert error_of(svc.add_item("p1", -5, 1)).startswith("Invalid price: -5.00")
    assert error_of(svc.add_item("p1", 5, 0)).startswith("Invalid quantity: 0")
    assert svc.cart.is_empty()


def test_add_item_unparseable_input():
    svc = make_service()
    assert error_of(svc.add_item("p1", "abc", 1)) == "Invalid price: 'abc'"
    assert error_of(svc.add_item("p1", "nan", 1)) == "Invalid price: 'nan'"
    assert error_of(svc.add_item("p1", 1, "two")) == "Invalid quantity: 'two'"
    assert error_of(svc.add_item("p1", 1, 2.5)) == "Invalid quantity: 2.5"
    assert svc.cart.is_empty()


def test_failed_add_does_not_touch_existing_item():
    svc = make_service()
    svc.add_item("p1", 10, 2)
    svc.add_item("p1", 10, -1)
    assert svc.cart.get_item("p1").quantity == 2


# ТЕСТЫ удаления и очистки


def test_remove_item():
    svc = make_service()
    svc.add_item("p1", 10, 1)

    assert svc.remove_item("p1").get_or_else("") == "Removed p1 from cart"
    assert error_of(svc.remove_item("p1")) == "Item not found in cart"


def test_clear_keeps_discount():
    svc = make_service()
    svc.add_item("p1", 10, 1)
    svc.apply_discount("percentage", percentage=10)

    assert svc.clear().get_or_else("") == "Cart cleared"
    assert svc.cart.is_empty()
    assert svc.discount_info() == "10% off"


# ТЕСТЫ скидок


def test_apply_percentage_discount():
    svc = make_service()
    result = svc.apply_discount("percentage", percentage=12.5)

    assert result.get_or_else("") == "Applied 12.5% discount"
    assert svc.cart.get_discount_strategy() == PercentageDiscount("12.5")


def test_apply_buy_x_get_y():
    svc = make_service()
    result = svc.apply_discount("buy_x_get_y", buy_x=2, get_y=1)

    assert result.get_or_else("") == "Applied Buy 2 Get 1 Free discount"
    assert svc.cart.get_discount_strategy() == BuyXGetYFree(2, 1)


def test_apply_none_removes_discount():
    svc = make_service()
    svc.apply_discount("percentage", percentage=10)

    assert svc.apply_discount("none").get_or_else("") == "Discount removed"
    assert svc.cart.get_discount_strategy() is None
    assert svc.discount_info() == "No discount"


def test_invalid_discount_keeps_previous_strategy():
    svc = make_service()
    svc.apply_discount("buy_x_get_y", buy_x=2, get_y=1)

    assert "between 0 and 100" in error_of(svc.apply_discount("percentage", percentage=150))
    assert "Invalid buy quantity: 0" in error_of(
        svc.apply_discount("buy_x_get_y", buy_x=0, get_y=1)
    )
    assert error_of(svc.apply_discount("percentage")) == "Invalid percentage: None"
    assert svc.cart.get_discount_strategy() == BuyXGetYFree(2, 1)


def test_unknown_discount_type():
    svc = make_service()
    assert error_of(svc.apply_discount("bogus")) == "Unknown discount type: bogus"


# ТЕСТЫ чтения


def test_safe_item_found_and_not_found():
    svc = make_service()
    svc.add_item("p1", 10, 1)

    assert svc.safe_item("p1").get_or_else(None).product_id == "p1"
    assert svc.safe_item("p999").is_none()


def test_summary():
    cart = Cart()
    cart.add_item(CartItem("p1", 10, 3))
    svc = CartService(cart)
    svc.apply_discount("buy_x_get_y", buy_x=2, get_y=1)

    summary = svc.summary()

    assert summary["item_count"] == 3
    assert not summary["is_empty"]
    assert summary["subtotal"] == Decimal("30")
    assert summary["discount"] == Decimal("10")
    assert summary["discount_info"] == "Buy 2 Get 1 Free"
    assert summary["total"] == Decimal("20")
    assert [i.product_id for i in summary["items"]] == ["p1"]


def test_service_works_on_caller_owned_cart():
    """Сервис не копирует корзину: изменения видны владельцу"""
    cart = Cart()
    CartService(cart).add_item("p1", 1, 1)
    assert cart.get_item("p1") is not None


def test_mutations_are_logged():
    svc = make_service()
    with capture_logs() as logs:
        svc.add_item("p1", 10, 1)
        svc.remove_item("missing")
        svc.apply_discount("percentage", percentage=5)

    assert [e["event"] for e in logs] == [
        "cart.item_added",
        "cart.rejected",
        "cart.discount_set",
    ]
    assert logs[1]["log_level"] == "warning"
    assert logs[2]["discount"] == "5% off"
