from datetime import datetime, timezone
from decimal import Decimal

import pytest
from PIL import ImageFont

from pos_terminal import printer
from pos_terminal.models import CompletedTransaction, PaymentMethod, SaleLine
from pos_terminal.rendering import format_money
from pos_terminal.report import summarize


class FakePrinter:
    def __init__(self):
        self.images = []
        self.cuts = 0
        self.drawer_pins = []

    def image(self, img):
        self.images.append(img)

    def cut(self):
        self.cuts += 1

    def cashdraw(self, pin):
        self.drawer_pins.append(pin)


@pytest.fixture
def fake_printer(monkeypatch):
    fake = FakePrinter()
    font = ImageFont.load_default()
    monkeypatch.setattr(printer, "_open_printer", lambda: fake)
    monkeypatch.setattr(printer, "resolve_printer_font_path", lambda: "test-font.ttf")
    monkeypatch.setattr(ImageFont, "truetype", lambda path, size: font)
    return fake


@pytest.fixture
def sale():
    return CompletedTransaction(
        id="txn-abc",
        lines=(
            SaleLine(sku="A", name="Indomie Goreng", quantity=2, unit_price=Decimal("1000")),
            SaleLine(sku="B", name="Teh Botol", quantity=1, unit_price=Decimal("500"), discount=Decimal("100")),
        ),
        total_amount=Decimal("2400"),
        payment_method=PaymentMethod.CASH,
        timestamp=datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc),
        session_id="sesi-Budi-20261019-0830",
        cashier_name="Budi",
        amount_tendered=Decimal("3000"),
        change=Decimal("600"),
    )


@pytest.mark.parametrize(
    "amount, expected",
    [
        (Decimal("0"), "0"),
        (Decimal("2400"), "2.400"),
        (Decimal("1234567.5"), "1.234.567,50"),
        (Decimal("-20000"), "-20.000"),
        (Decimal("999.999"), "1.000"),
    ],
)
def test_format_money(amount, expected):
    assert format_money(amount) == expected


def test_receipt_lines_show_total_tender_and_change(sale):
    lines = printer.receipt_lines(sale)

    assert all(len(line) <= printer.RECEIPT_WIDTH_CHARS for line in lines)
    assert "Cashier: Budi" in lines
    assert any(line.startswith("TOTAL") and line.endswith("2.400") for line in lines)
    assert any(line.startswith("Cash") and line.endswith("3.000") for line in lines)
    assert any(line.startswith("Change") and line.endswith("600") for line in lines)
    assert any(line.strip().startswith("Discount") and line.endswith("-100") for line in lines)


def test_report_lines_show_expected_cash():
    report = summarize("sesi-Budi-20261019-0830", [], [])
    lines = printer.report_lines(report, "Budi")

    assert "Session: sesi-Budi-20261019-0830" in lines
    assert any(line.startswith("Expected in drawer") and line.endswith("0") for line in lines)


def test_emit_receipt_prints_one_image_per_line(fake_printer, sale):
    printer.emit_receipt(sale)

    assert len(fake_printer.images) == len(printer.receipt_lines(sale)) + 1
    assert all(img.size[0] == printer.PRINTER_WIDTH_PX for img in fake_printer.images)
    assert fake_printer.cuts == 1


def test_emit_receipt_propagates_printer_failure(monkeypatch, sale):
    def offline():
        raise RuntimeError("printer offline")

    monkeypatch.setattr(printer, "_open_printer", offline)
    with pytest.raises(RuntimeError, match="offline"):
        printer.emit_receipt(sale)


def test_open_cash_drawer_kicks_configured_pin(fake_printer):
    printer.open_cash_drawer()
    assert fake_printer.drawer_pins == [printer.PRINTER_DRAWER_PIN]


def test_font_override_from_environment(monkeypatch, tmp_path):
    font = tmp_path / "receipt.ttf"
    font.write_bytes(b"")
    monkeypatch.setenv("POS_PRINTER_FONT_PATH", str(font))
    assert printer.resolve_printer_font_path() == str(font)
