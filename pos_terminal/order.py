"""The in-progress sale being built at the terminal."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from pos_terminal.errors import NotFoundError, Result, ValidationError
from pos_terminal.models import ZERO, OrderLine, Product, to_money, to_quantity


class Order:
    """Ordered line items plus the cashier's current line selection."""

    def __init__(self) -> None:
        self.lines: list[OrderLine] = []
        self.selected_line_index: int | None = None

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def grand_total(self) -> Decimal:
        return sum((line.total for line in self.lines), ZERO)

    def add_or_increment(self, product: Product, qty: object = 1) -> Result:
        """Add `qty` of `product`, merging into an existing line with the same SKU."""
        try:
            qty = to_quantity(qty)
            price = to_money(product.price, "Unit price")
        except ValidationError as exc:
            return Result.failure(exc)
        if qty <= 0:
            return Result.failure(ValidationError("Quantity must be at least 1."))
        if price < 0:
            return Result.failure(ValidationError("Unit price cannot be negative."))

        for idx, line in enumerate(self.lines):
            if line.sku == product.sku:
                line.quantity += qty
                line.recompute()
                self.selected_line_index = idx
                return Result.success(idx)

        self.lines.append(OrderLine(sku=product.sku, name=product.name, quantity=qty, unit_price=price))
        self.selected_line_index = len(self.lines) - 1
        return Result.success(self.selected_line_index)

    def update_line(
        self,
        index: int,
        quantity: object = None,
        unit_price: object = None,
        discount: object = None,
    ) -> Result:
        if not (0 <= index < len(self.lines)):
            return Result.failure(NotFoundError(f"No line at position {index + 1}."))

        line = self.lines[index]
        try:
            new_quantity = line.quantity if quantity is None else to_quantity(quantity)
            new_price = line.unit_price if unit_price is None else to_money(unit_price, "Unit price")
            new_discount = line.discount if discount is None else to_money(discount, "Discount")
        except ValidationError as exc:
            return Result.failure(exc)

        if new_quantity <= 0:
            return Result.failure(ValidationError("Quantity must be at least 1."))
        if new_price < 0:
            return Result.failure(ValidationError("Unit price cannot be negative."))
        if new_discount < 0:
            return Result.failure(ValidationError("Discount cannot be negative."))
        if new_discount > new_price:
            return Result.failure(ValidationError("Discount cannot exceed the unit price."))

        line.quantity = new_quantity
        line.unit_price = new_price
        line.discount = new_discount
        line.recompute()
        return Result.success(line)

    def remove_line(self, index: int) -> Result:
        if not (0 <= index < len(self.lines)):
            return Result.failure(NotFoundError(f"No line at position {index + 1}."))

        removed = self.lines.pop(index)
        if not self.lines:
            self.selected_line_index = None
        elif self.selected_line_index is not None and self.selected_line_index >= len(self.lines):
            self.selected_line_index = len(self.lines) - 1
        return Result.success(removed)

    def clear(self) -> None:
        self.lines = []
        self.selected_line_index = None

    def select(self, index: int | None) -> None:
        if index is None or not (0 <= index < len(self.lines)):
            self.selected_line_index = None
            return
        self.selected_line_index = index

    def move_selection(self, delta: int) -> None:
        if not self.lines:
            return
        if self.selected_line_index is None:
            self.selected_line_index = 0 if delta > 0 else len(self.lines) - 1
        else:
            self.selected_line_index = (self.selected_line_index + delta) % len(self.lines)

    def selected_line(self) -> OrderLine | None:
        if self.selected_line_index is None:
            return None
        return self.lines[self.selected_line_index]

    def snapshot(self) -> tuple[OrderLine, ...]:
        return tuple(line.copy() for line in self.lines)

    def replace_lines(self, lines: Iterable[OrderLine]) -> None:
        self.lines = [line.copy() for line in lines]
        self.selected_line_index = 0 if self.lines else None
