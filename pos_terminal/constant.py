"""Editable static catalog, labels and default keybindings."""

from __future__ import annotations

# Rows consumed by pos_terminal.data (which wraps them into Product instances).
PRODUCT_ROWS: list[dict[str, str | int]] = [
    {"sku": "8991002101", "name": "Indomie Goreng", "price": 3500},
    {"sku": "8991002102", "name": "Indomie Soto", "price": 3200},
    {"sku": "8992761111", "name": "Aqua 600ml", "price": 4000},
    {"sku": "8992761112", "name": "Aqua 1500ml", "price": 7000},
    {"sku": "8998866200", "name": "Teh Botol Sosro", "price": 5000},
    {"sku": "8999999001", "name": "Gula Pasir 1kg", "price": 17500},
    {"sku": "8999999002", "name": "Minyak Goreng 2L", "price": 36000},
    {"sku": "8999999003", "name": "Beras 5kg", "price": 72000},
    {"sku": "8996001600", "name": "Kopi Kapal Api", "price": 1500},
    {"sku": "8991038775", "name": "Roti Tawar", "price": 16000},
    {"sku": "8992753102", "name": "Susu UHT Coklat", "price": 6500},
    {"sku": "8993175538", "name": "Sabun Mandi", "price": 4500},
]

# Textual key names.
DEFAULT_KEYBINDS: dict[str, str] = {
    "hold": "f2",
    "recall": "f3",
    "clear": "f4",
    "lock_screen": "f5",
    "edit_selected_line": "f7",
    "delete_selected_line": "f8",
    "pay": "f9",
    "open_cashier_menu": "f11",
}

ACTION_LABELS: dict[str, str] = {
    "hold": "Hold order",
    "recall": "Recall order",
    "open_cashier_menu": "Cashier menu",
    "clear": "Clear order",
    "edit_selected_line": "Edit line",
    "delete_selected_line": "Delete line",
    "pay": "Payment",
    "lock_screen": "Lock terminal",
}

PAYMENT_METHOD_LABELS: dict[str, str] = {
    "cash": "Cash",
    "debit": "Debit Card",
    "credit": "Credit Card",
    "qris": "QRIS",
}

CASH_DRAWER_KIND_LABELS: dict[str, str] = {
    "opening_float": "Opening Float",
    "cash_withdrawal": "Cash Withdrawal",
}
