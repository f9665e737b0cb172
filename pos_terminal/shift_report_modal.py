"""End-of-shift cash reconciliation report."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from pos_terminal.debug_log import log_debug
from pos_terminal.dispatcher import CommandDispatcher, ModalKind
from pos_terminal.printer import print_shift_report
from pos_terminal.rendering import format_money
from pos_terminal.report import ShiftReport, build_shift_report


class ShiftReportModal(ModalScreen[None]):
    """Read-only report, rebuilt from storage on open and on refresh."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("r", "refresh_report", "Refresh"),
        ("p", "print_report", "Print"),
    ]

    CSS = """
    ShiftReportModal {
        align: center middle;
        background: $background 60%;
    }

    #report-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #report-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #report-body {
        color: white;
        margin-bottom: 1;
    }

    #report-status {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #report-help {
        color: #dddddd;
    }
    """

    def __init__(self, dispatcher: CommandDispatcher) -> None:
        super().__init__()
        self.dispatcher = dispatcher
        self.report: ShiftReport | None = None
        self.status = ""

    def compose(self) -> ComposeResult:
        role = self.dispatcher.context.role.value.title()
        with Container(id="report-dialog"):
            yield Static(f"Shift Report [{role}]", id="report-title")
            yield Static(id="report-body")
            yield Static(id="report-status")
            yield Static("R refresh. P print. Esc close.", id="report-help")

    def on_mount(self) -> None:
        self.action_refresh_report()

    def action_close(self) -> None:
        self.dispatcher.close_modal(ModalKind.SHIFT_REPORT)
        self.dismiss(None)

    def action_refresh_report(self) -> None:
        result = build_shift_report(self.dispatcher.context.store, self.dispatcher.context.session.session_id)
        if result.ok:
            self.report = result.value
            self.status = ""
        else:
            self.status = result.error.message
        self._refresh_content()

    def action_print_report(self) -> None:
        if self.report is None:
            return
        try:
            print_shift_report(self.report, self.dispatcher.context.session.cashier_name)
            self.status = "Report sent to printer"
        except Exception as exc:
            self.status = f"Print failed: {exc}"
            log_debug(f"report_print_failed error={exc!r}")
        self._refresh_content()

    def _refresh_content(self) -> None:
        body = Text(style="white")
        report = self.report
        if report is not None:
            rows = (
                ("Total sales", format_money(report.total_sales)),
                ("Transactions", str(report.transaction_count)),
                None,
                ("Cash", format_money(report.cash_sales)),
                ("Debit Card", format_money(report.debit_sales)),
                ("Credit Card", format_money(report.credit_sales)),
                ("QRIS", format_money(report.qris_sales)),
                None,
                ("Opening float", format_money(report.opening_float)),
                ("Cash payments", format_money(report.cash_sales)),
                ("Withdrawals", format_money(report.withdrawals)),
            )
            for row in rows:
                if row is None:
                    body.append("\n")
                    continue
                label, value = row
                body.append(f"{label:<20}{value:>16}\n")
            body.append(f"{'Expected in drawer':<20}{format_money(report.expected_cash_in_drawer):>16}", style="bold")
        self.query_one("#report-body", Static).update(body)
        self.query_one("#report-status", Static).update(self.status)
