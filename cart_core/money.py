from decimal import Decimal
from typing import Optional, Union

from .config import Settings, settings

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")


def to_decimal(value: Number) -> Decimal:
    """Приводит число к Decimal через str, чтобы 10.1 оставалось 10.1"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def format_money(amount: Number, cfg: Optional[Settings] = None) -> str:
    """Форматирует сумму для отображения: 12.5 -> "$12.50" """
    cfg = cfg or settings
    return f"{cfg.currency}{to_decimal(amount):,.{cfg.decimals}f}"
