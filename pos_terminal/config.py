"""Runtime configuration defaults for persistence, access and printing."""

from __future__ import annotations

import os

DB_PATH = os.environ.get("POS_DB_PATH", "data/pos.db")
DEBUG_LOG_PATH = os.environ.get("POS_DEBUG_LOG_PATH", "/tmp/pos-debug.log")

# PIN to open the terminal and unlock the lock screen.
ACCESS_PIN = os.environ.get("POS_ACCESS_PIN", "1234")
# PIN a supervisor enters to let staff change a unit price.
AUTH_PIN = os.environ.get("POS_AUTH_PIN", "1234")

DEFAULT_CUSTOMER_LABEL = "Walk-in"

STORE_HEADER_LINES = (
    "TOKO BAGUS",
    "Ruko Gaden Plaza No. 9B",
    "082324703076",
)

PRINTER_USB_VENDOR_ID = 0x28E9
PRINTER_USB_PRODUCT_ID = 0x0289
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 24
PRINTER_FONT_PATH = "/System/Library/Fonts/SFNS.ttf"
PRINTER_FONT_OVERRIDE_ENV = "POS_PRINTER_FONT_PATH"
PRINTER_LEFT_INDENT_PX = 8
PRINTER_TAIL_SPACER_PX = 70
PRINTER_DRAWER_PIN = 2
