"""Domain models for the POS terminal."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum

from pos_terminal.errors import ValidationError

ZERO = Decimal("0")


def to_money(value: object, field_name: str = "amount") -> Decimal:
    """Coerce user or catalog input into a finite Decimal."""
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} is required.")
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"{field_name} must be a number.") from None
    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be a number.")
    return amount


def to_quantity(value: object) -> int:
    """Coerce input into a whole-number quantity; lossy conversions are rejected."""
    if isinstance(value, bool):
        raise ValidationError("Quantity must be a whole number.")
    if isinstance(value, int):
        return value
    try:
        amount = to_money(value, "Quantity")
    except ValidationError:
        raise ValidationError("Quantity must be a whole number.") from None
    if amount != amount.to_integral_value():
        raise ValidationError("Quantity must be a whole number.")
    return int(amount)


class Action(str, Enum):
    """Closed set of commands a key can be bound to."""

    HOLD = "hold"
    RECALL = "recall"
    OPEN_CASHIER_MENU = "open_cashier_menu"
    CLEAR = "clear"
    EDIT_SELECTED_LINE = "edit_selected_line"
    DELETE_SELECTED_LINE = "delete_selected_line"
    PAY = "pay"
    LOCK_SCREEN = "lock_screen"


class PaymentMethod(str, Enum):
    CASH = "cash"
    DEBIT = "debit"
    CREDIT = "credit"
    QRIS = "qris"


class CashDrawerKind(str, Enum):
    OPENING_FLOAT = "opening_float"
    CASH_WITHDRAWAL = "cash_withdrawal"


class UserRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"


@dataclass(frozen=True)
class Product:
    """A catalog item the cashier can scan or search."""

    sku: str
    name: str
    price: Decimal


@dataclass
class OrderLine:
    """One row of the order; `total` is kept in step with the other fields."""

    sku: str
    name: str
    quantity: int
    unit_price: Decimal
    discount: Decimal = ZERO
    total: Decimal = field(default=ZERO)

    def __post_init__(self) -> None:
        self.recompute()

    def recompute(self) -> None:
        self.total = (self.unit_price - self.discount) * self.quantity

    def copy(self) -> OrderLine:
        return OrderLine(
            sku=self.sku,
            name=self.name,
            quantity=self.quantity,
            unit_price=self.unit_price,
            discount=self.discount,
        )


@dataclass(frozen=True)
class SaleLine:
    """A line as it was sold. Unlike `OrderLine` it cannot change after the sale."""

    sku: str
    name: str
    quantity: int
    unit_price: Decimal
    discount: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return (self.unit_price - self.discount) * self.quantity

    @classmethod
    def from_order_line(cls, line: OrderLine) -> SaleLine:
        return cls(
            sku=line.sku,
            name=line.name,
            quantity=line.quantity,
            unit_price=line.unit_price,
            discount=line.discount,
        )


@dataclass(frozen=True)
class HeldOrder:
    """A suspended order waiting to be recalled."""

    id: int
    lines: tuple[OrderLine, ...]
    total: Decimal
    customer_label: str
    suspended_at: datetime


@dataclass(frozen=True)
class CashDrawerEntry:
    """A manual cash movement recorded against a cashier session."""

    id: str
    kind: CashDrawerKind
    amount: Decimal
    description: str
    timestamp: datetime
    session_id: str


@dataclass(frozen=True)
class CashierSession:
    session_id: str
    cashier_name: str
    started_at: datetime


@dataclass(frozen=True)
class CompletedTransaction:
    """The immutable record of a finalized sale."""

    id: str
    lines: tuple[SaleLine, ...]
    total_amount: Decimal
    payment_method: PaymentMethod
    timestamp: datetime
    session_id: str
    cashier_name: str
    amount_tendered: Decimal
    change: Decimal
