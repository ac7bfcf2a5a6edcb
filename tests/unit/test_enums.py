"""Enums must match DB CHECK constraints and exchange wire values."""
from src.pm_common.enums import OrderSide, OrderStatus, OrderType, SettingsGroup


def test_order_side_values() -> None:
    assert OrderSide.BUY == 0
    assert OrderSide.SELL == 1


def test_order_type_names_are_wire_values() -> None:
    assert OrderType(0).name == "MARKET"
    assert OrderType(1).name == "LIMIT"


def test_order_status_values() -> None:
    assert {s.value for s in OrderStatus} == {"open", "filled", "cancelled"}


def test_settings_group() -> None:
    assert SettingsGroup.AFFILIATE.value == "affiliate"
