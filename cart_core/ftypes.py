# cart_core/ftypes.py
# Maybe / Either для границы между ядром корзины и страницей:
# ядро бросает исключения, сервис превращает их в Either, поиск позиции даёт Maybe.

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
L = TypeVar("L")
R = TypeVar("R")


@dataclass(frozen=True)
class Maybe(Generic[T]):
    """
    Значение, которого может не быть (позиция корзины по product_id).
    Maybe.some(item) / Maybe.nothing().
    """

    value: Optional[T]

    @staticmethod
    def some(value: T) -> "Maybe[T]":
        return Maybe(value)

    @staticmethod
    def nothing() -> "Maybe[None]":
        return Maybe(None)

    def __init__(self, value: Optional[T]):
        object.__setattr__(self, "value", value)

    def is_some(self) -> bool:
        return self.value is not None

    def is_none(self) -> bool:
        return self.value is None

    def get_or_else(self, default: U) -> T | U:
        return self.value if self.is_some() else default

    def __repr__(self) -> str:
        return f"Some({self.value})" if self.is_some() else "Nothing"


@dataclass(frozen=True)
class Either(Generic[L, R]):
    """
    Результат операции над корзиной.
    Left  — ошибка ввода ({"error": "..."}), корзина не изменилась.
    Right — сообщение для пользователя ("Cart cleared").
    """

    is_left: bool
    value: Union[L, R]

    @staticmethod
    def left(value: L) -> "Either[L, R]":
        return Either(True, value)

    @staticmethod
    def right(value: R) -> "Either[L, R]":
        return Either(False, value)

    def __init__(self, is_left: bool, value: Union[L, R]):
        object.__setattr__(self, "is_left", is_left)
        object.__setattr__(self, "value", value)

    @property
    def is_right(self) -> bool:
        return not self.is_left

    def fold(self, on_left: Callable[[L], U], on_right: Callable[[R], U]) -> U:
        """Сводит обе ветви к одному значению (например, к вызову st.error / st.success)"""
        return on_left(self.value) if self.is_left else on_right(self.value)  # type: ignore[arg-type]

    def get_or_else(self, default: U) -> R | U:
        return self.value if not self.is_left else default  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"Left({self.value})" if self.is_left else f"Right({self.value})"
