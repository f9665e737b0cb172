"""Thermal receipt printing over ESC/POS."""

from __future__ import annotations

import os
from pathlib import Path

from pos_terminal.config import (
    PRINTER_DRAWER_PIN,
    PRINTER_FONT_OVERRIDE_ENV,
    PRINTER_FONT_PATH,
    PRINTER_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_TAIL_SPACER_PX,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
    PRINTER_WIDTH_PX,
    STORE_HEADER_LINES,
)
from pos_terminal.models import CompletedTransaction
from pos_terminal.rendering import format_money, payment_method_label
from pos_terminal.report import ShiftReport

RECEIPT_WIDTH_CHARS = 32
_SEPARATOR = "-" * RECEIPT_WIDTH_CHARS
_LINUX_FONT_FALLBACKS = (
    "/usr/share/fonts/TTF/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/liberation/LiberationMono-Regular.ttf",
)


def _two_column(left: str, right: str) -> str:
    gap = RECEIPT_WIDTH_CHARS - len(left) - len(right)
    if gap < 1:
        left = left[: max(0, RECEIPT_WIDTH_CHARS - len(right) - 1)]
        gap = 1
    return f"{left}{' ' * gap}{right}"


def receipt_lines(tx: CompletedTransaction) -> list[str]:
    """Lay out a sale receipt as fixed-width text lines."""
    lines = [header.center(RECEIPT_WIDTH_CHARS).rstrip() for header in STORE_HEADER_LINES]
    lines.append(_SEPARATOR)
    lines.append(f"{tx.timestamp.astimezone():%d/%m/%Y %H:%M}")
    lines.append(f"Cashier: {tx.cashier_name}")
    lines.append(f"No: {tx.id}")
    lines.append(_SEPARATOR)
    for line in tx.lines:
        lines.append(line.name[:RECEIPT_WIDTH_CHARS])
        lines.append(
            _two_column(f"  {line.quantity} x {format_money(line.unit_price)}", format_money(line.unit_price * line.quantity))
        )
        if line.discount:
            lines.append(_two_column("  Discount", f"-{format_money(line.discount * line.quantity)}"))
    lines.append(_SEPARATOR)
    lines.append(_two_column("TOTAL", format_money(tx.total_amount)))
    lines.append(_two_column(payment_method_label(tx.payment_method), format_money(tx.amount_tendered)))
    lines.append(_two_column("Change", format_money(tx.change)))
    lines.append(_SEPARATOR)
    lines.append("Thank you".center(RECEIPT_WIDTH_CHARS).rstrip())
    return lines


def report_lines(report: ShiftReport, cashier_name: str) -> list[str]:
    """Lay out the end-of-shift report as fixed-width text lines."""
    return [
        "SHIFT REPORT".center(RECEIPT_WIDTH_CHARS).rstrip(),
        f"Cashier: {cashier_name}",
        f"Session: {report.session_id}",
        _SEPARATOR,
        _two_column("Total sales", format_money(report.total_sales)),
        _two_column("Transactions", str(report.transaction_count)),
        _SEPARATOR,
        _two_column("Cash", format_money(report.cash_sales)),
        _two_column("Debit Card", format_money(report.debit_sales)),
        _two_column("Credit Card", format_money(report.credit_sales)),
        _two_column("QRIS", format_money(report.qris_sales)),
        _SEPARATOR,
        _two_column("Opening float", format_money(report.opening_float)),
        _two_column("Cash sales", format_money(report.cash_sales)),
        _two_column("Withdrawals", format_money(report.withdrawals)),
        _two_column("Expected in drawer", format_money(report.expected_cash_in_drawer)),
    ]


def resolve_printer_font_path() -> str:
    """
    Resolve a printer font path.

    Resolution order:
    1. POS_PRINTER_FONT_PATH (if set)
    2. PRINTER_FONT_PATH
    3. Known Linux fallbacks
    """
    env_override = os.environ.get(PRINTER_FONT_OVERRIDE_ENV, "").strip()
    candidates: list[str] = []
    if env_override:
        candidates.append(env_override)
    candidates.append(PRINTER_FONT_PATH)
    candidates.extend(_LINUX_FONT_FALLBACKS)

    seen: set[str] = set()
    for candidate in candidates:
        if not candidate or candidate in seen:
            continue
        seen.add(candidate)
        if Path(candidate).is_file():
            return candidate

    raise RuntimeError(
        f"No usable printer font found. Set {PRINTER_FONT_OVERRIDE_ENV} to a valid .ttf/.otf file. "
        f"Tried: {', '.join(seen)}"
    )


def check_printer_dependencies() -> tuple[bool, str]:
    """Check whether printer dependencies are importable."""
    try:
        from escpos.printer import Usb  # noqa: F401
        from PIL import ImageFont

        ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)
    except Exception as exc:
        return (False, f"Printer unavailable: {exc}")
    return (True, "Printer ready")


def _render_line(text: str, font: object) -> object:
    from PIL import Image, ImageDraw

    probe = Image.new("1", (1, 1), color=1)
    bbox = ImageDraw.Draw(probe).textbbox((0, 0), text or " ", font=font)
    text_height = bbox[3] - bbox[1]
    canvas_height = max(PRINTER_FONT_SIZE, text_height + 6)

    img = Image.new("1", (PRINTER_WIDTH_PX, canvas_height), color=1)
    draw = ImageDraw.Draw(img)
    # Offset by bbox top so descenders are not clipped.
    y = (canvas_height - text_height) // 2 - bbox[1]
    draw.text((PRINTER_LEFT_INDENT_PX, y), text, font=font, fill=0)
    return img


def _render_spacer(height_px: int) -> object:
    from PIL import Image

    return Image.new("1", (PRINTER_WIDTH_PX, max(1, height_px)), color=1)


def _open_printer() -> object:
    try:
        from escpos.printer import Usb
    except Exception as exc:
        raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc
    return Usb(PRINTER_USB_VENDOR_ID, PRINTER_USB_PRODUCT_ID)


def _print_lines(lines: list[str]) -> None:
    from PIL import ImageFont

    printer = _open_printer()
    font = ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)
    for line in lines:
        printer.image(_render_line(line, font))
    printer.image(_render_spacer(PRINTER_TAIL_SPACER_PX))
    printer.cut()


def emit_receipt(tx: CompletedTransaction) -> None:
    """Print the receipt for a completed sale; raises when the printer fails."""
    _print_lines(receipt_lines(tx))


def print_shift_report(report: ShiftReport, cashier_name: str) -> None:
    _print_lines(report_lines(report, cashier_name))


def open_cash_drawer() -> None:
    """Send the drawer kick pulse through the receipt printer."""
    _open_printer().cashdraw(PRINTER_DRAWER_PIN)
