"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum, IntEnum


class OrderSide(IntEnum):
    BUY = 0
    SELL = 1


class OrderType(IntEnum):
    MARKET = 0
    LIMIT = 1


class OrderStatus(str, Enum):
    OPEN = "open"
    FILLED = "filled"
    CANCELLED = "cancelled"


class SettingsGroup(str, Enum):
    AFFILIATE = "affiliate"
