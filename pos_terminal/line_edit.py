"""Working copy of one order line while the edit dialog is open."""

from __future__ import annotations

from decimal import Decimal

from pos_terminal.debug_log import log_debug
from pos_terminal.errors import AuthorizationError, Result, ValidationError
from pos_terminal.models import ZERO, OrderLine, UserRole, to_money, to_quantity
from pos_terminal.order import Order
from pos_terminal.session import PinAuthorizer


class LineEditDraft:
    """Pending quantity/price/discount for the line at `index`.

    Nothing touches the order until `commit`; dropping the draft is a cancel.
    """

    def __init__(self, index: int, line: OrderLine, role: UserRole) -> None:
        self.index = index
        self.original = line.copy()
        self.quantity = line.quantity
        self.unit_price = line.unit_price
        self.discount = line.discount
        self.role = role
        self.price_locked = role == UserRole.STAFF

    @property
    def total(self) -> Decimal:
        return (self.unit_price - self.discount) * self.quantity

    @property
    def discount_percent(self) -> Decimal:
        if self.unit_price <= 0:
            return ZERO
        return self.discount / self.unit_price * 100

    def set_quantity(self, value: object) -> Result:
        try:
            quantity = to_quantity(value)
        except ValidationError as exc:
            return Result.failure(exc)
        self.quantity = quantity
        return Result.success(quantity)

    def set_unit_price(self, value: object) -> Result:
        if self.price_locked:
            return Result.failure(AuthorizationError("Unit price is locked."))
        try:
            self.unit_price = to_money(value, "Unit price")
        except ValidationError as exc:
            return Result.failure(exc)
        return Result.success(self.unit_price)

    def set_discount(self, value: object) -> Result:
        try:
            self.discount = to_money(value, "Discount")
        except ValidationError as exc:
            return Result.failure(exc)
        return Result.success(self.discount)

    def set_discount_percent(self, value: object) -> Result:
        try:
            percent = to_money(value, "Discount %")
        except ValidationError as exc:
            return Result.failure(exc)
        self.discount = self.unit_price * percent / 100
        return Result.success(self.discount)

    def unlock_price(self, authorizer: PinAuthorizer, pin: str | None = None) -> Result:
        """Make the price editable for the rest of this draft's life."""
        if not self.price_locked:
            return Result.success(True)
        if self.role != UserRole.STAFF:
            self.price_locked = False
            return Result.success(True)
        if pin is None or not authorizer.check_pin(pin):
            log_debug(f"price_unlock_denied line={self.index}")
            return Result.failure(AuthorizationError("Wrong PIN."))
        self.price_locked = False
        log_debug(f"price_unlock_granted line={self.index}")
        return Result.success(True)

    def commit(self, order: Order) -> Result:
        if self.price_locked and self.unit_price != self.original.unit_price:
            return Result.failure(AuthorizationError("Unit price is locked."))
        return order.update_line(
            self.index,
            quantity=self.quantity,
            unit_price=self.unit_price,
            discount=self.discount,
        )
