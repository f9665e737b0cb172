"""Money formatting and rich-text helpers for the terminal and receipts."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from rich.text import Text

from pos_terminal.constant import CASH_DRAWER_KIND_LABELS, PAYMENT_METHOD_LABELS
from pos_terminal.models import CashDrawerKind, HeldOrder, OrderLine, PaymentMethod


def format_money(amount: Decimal) -> str:
    """Format like id-ID locale: `.` groups thousands, `,` separates cents."""
    quantized = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if quantized < 0 else ""
    whole, _, cents = f"{abs(quantized):.2f}".partition(".")
    grouped = f"{int(whole):,}".replace(",", ".")
    if cents == "00":
        return f"{sign}{grouped}"
    return f"{sign}{grouped},{cents}"


def payment_method_label(method: PaymentMethod) -> str:
    return PAYMENT_METHOD_LABELS[PaymentMethod(method).value]


def cash_drawer_kind_label(kind: CashDrawerKind) -> str:
    return CASH_DRAWER_KIND_LABELS[CashDrawerKind(kind).value]


def format_order_line(index: int, line: OrderLine, selected: bool) -> Text:
    """Render one order row with a selection pointer."""
    text = Text()
    pointer = "➤ " if selected else "  "
    text.append(pointer)
    text.append(f"{index + 1}. ")
    text.append(line.name, style="bold" if selected else "")
    text.append(f"  {line.quantity} x {format_money(line.unit_price)}", style="dim")
    if line.discount:
        text.append(f"  -{format_money(line.discount)}", style="#ffb3b3")
    text.append(f"  = {format_money(line.total)}")
    return text


def format_held_order(held: HeldOrder, selected: bool) -> Text:
    text = Text()
    pointer = "➤ " if selected else "  "
    first_name = held.lines[0].name if held.lines else "(empty)"
    text.append(pointer)
    text.append(f"{held.suspended_at.astimezone():%H:%M} ", style="dim")
    text.append(f"{held.customer_label} ", style="bold")
    text.append(f"{first_name} ({len(held.lines)} lines) ")
    text.append(format_money(held.total))
    return text


def format_total(label: str, amount: Decimal, style: str = "bold") -> Text:
    text = Text()
    text.append(f"{label}: ")
    text.append(format_money(amount), style=style)
    return text
