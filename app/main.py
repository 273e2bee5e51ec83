import sys
import os
import streamlit as st

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from cart_core.config import settings
from cart_core.domain import Cart
from cart_core.errors import SnapshotError
from cart_core.logs import configure_logging
from cart_core.money import format_money
from cart_core.service import (
    CartService,
    DISCOUNT_BUY_X_GET_Y,
    DISCOUNT_NONE,
    DISCOUNT_PERCENTAGE,
    DISCOUNT_TYPES,
)
from cart_core.snapshot import dumps, loads


# ============ Инициализация ============
@st.cache_resource
def init_logging():
    configure_logging(level=settings.log_level, log_json=settings.log_json)
    return True


st.set_page_config(
    page_title="Shopping Cart",
    page_icon="🛒",
    layout="wide",
)

init_logging()

# Корзина живёт в сессии; ядро глобального состояния не держит
if "cart" not in st.session_state:
    st.session_state.cart = Cart()

if "flash" not in st.session_state:
    st.session_state.flash = None

service = CartService(st.session_state.cart)

DISCOUNT_LABELS = {
    DISCOUNT_NONE: "No Discount",
    DISCOUNT_PERCENTAGE: "Percentage Discount",
    DISCOUNT_BUY_X_GET_Y: "Buy X Get Y Free",
}


# ============ Вспомогательные функции ============
def remember(result):
    """Сохраняет результат операции для показа после st.rerun()"""
    st.session_state.flash = result.fold(
        lambda err: ("error", err["error"]),
        lambda msg: ("success", msg),
    )


def money(amount) -> str:
    """format_money для markdown: знак доллара в streamlit открывает LaTeX"""
    return format_money(amount).replace("$", "\\$")


def show_flash():
    flash = st.session_state.flash
    if not flash:
        return
    kind, text = flash
    if kind == "error":
        st.error(text)
    else:
        st.success(text)
    st.session_state.flash = None


# ============ HEADER ============
st.title("🛒 Shopping Cart")
show_flash()

# ============ SIDEBAR - снимок корзины ============
with st.sidebar:
    st.header("💾 Снимок корзины")
    st.download_button(
        "⬇️ Скачать корзину",
        data=dumps(st.session_state.cart),
        file_name="cart.json",
        mime="application/json",
    )

    uploaded = st.file_uploader("Загрузить корзину", type="json")
    if uploaded is not None and st.button("⬆️ Восстановить", key="restore"):
        try:
            st.session_state.cart = loads(uploaded.getvalue().decode("utf-8"))
            st.session_state.flash = ("success", "Cart restored")
        except (SnapshotError, UnicodeDecodeError) as exc:
            st.session_state.flash = ("error", str(exc))
        st.rerun()

left, right = st.columns(2)

# ============ Добавление товара ============
with left:
    st.subheader("Add Item")
    with st.form("add_item", clear_on_submit=True):
        product_id = st.text_input("Product ID")
        unit_price = st.number_input(
            f"Unit Price ({settings.currency})",
            min_value=0.0,
            step=0.01,
            format=f"%.{settings.decimals}f",
        )
        quantity = st.number_input("Quantity", min_value=1, value=1, step=1)

        if st.form_submit_button("Add to Cart", type="primary"):
            remember(service.add_item(product_id, unit_price, int(quantity)))
            st.rerun()

    # ============ Скидка ============
    st.subheader("Discount")
    discount_type = st.selectbox(
        "Discount Type",
        DISCOUNT_TYPES,
        format_func=DISCOUNT_LABELS.get,
        key="discount_type",
    )

    percentage = buy_x = get_y = None
    if discount_type == DISCOUNT_PERCENTAGE:
        percentage = st.number_input(
            "Percentage (%)", min_value=0.0, max_value=100.0, step=0.1, key="percentage"
        )
    elif discount_type == DISCOUNT_BUY_X_GET_Y:
        col1, col2 = st.columns(2)
        with col1:
            buy_x = st.number_input("Buy X", min_value=1, value=2, step=1, key="buy_x")
        with col2:
            get_y = st.number_input("Get Y Free", min_value=1, value=1, step=1, key="get_y")

    if st.button("Apply Discount", key="apply_discount"):
        remember(service.apply_discount(discount_type, percentage, buy_x, get_y))
        st.rerun()

# ============ Корзина ============
with right:
    summary = service.summary()

    head, action = st.columns([4, 1])
    with head:
        st.subheader("Cart")
    with action:
        if not summary["is_empty"] and st.button("Clear Cart", key="clear_cart"):
            remember(service.clear())
            st.rerun()

    if summary["is_empty"]:
        st.info("Your cart is empty")
    else:
        cols = st.columns([3, 2, 1, 2, 1])
        for col, title in zip(cols, ("Product", "Price", "Qty", "Total", "")):
            col.markdown(f"**{title}**")

        for item in summary["items"]:
            cols = st.columns([3, 2, 1, 2, 1])
            cols[0].write(item.product_id)
            cols[1].write(money(item.unit_price))
            cols[2].write(item.quantity)
            cols[3].write(money(item.total()))
            if cols[4].button("×", key=f"remove_{item.product_id}"):
                remember(service.remove_item(item.product_id))
                st.rerun()

        st.divider()
        st.markdown(f"**Subtotal:** {money(summary['subtotal'])}")
        if summary["discount"] > 0:
            st.markdown(
                f":green[**Discount ({summary['discount_info']}):** "
                f"-{money(summary['discount'])}]"
            )
        st.markdown(f"### Total: **{money(summary['total'])}**")
        st.caption(f"Items in cart: {summary['item_count']}")
