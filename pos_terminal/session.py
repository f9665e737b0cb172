"""Cashier session and the terminal context that owns all engine state."""

from __future__ import annotations

import hmac
from datetime import datetime
from typing import Callable

from pos_terminal import config
from pos_terminal.debug_log import log_debug
from pos_terminal.errors import Result, ValidationError
from pos_terminal.held_orders import HeldOrderRegistry
from pos_terminal.ledger import CashDrawerLedger
from pos_terminal.models import CashierSession, CompletedTransaction, UserRole
from pos_terminal.order import Order
from pos_terminal.persistence import SqliteStore

ReceiptEmitter = Callable[[CompletedTransaction], None]


def new_session_id(cashier_name: str, now: datetime) -> str:
    """Build the `sesi-<cashier>-YYYYMMDD-HHMM` identifier used to scope records."""
    slug = "-".join(cashier_name.split())
    return f"sesi-{slug}-{now:%Y%m%d}-{now:%H%M}"


class PinAuthorizer:
    """Checks a candidate PIN against one configured PIN."""

    def __init__(self, pin: str) -> None:
        self._pin = pin

    def check_pin(self, candidate: str) -> bool:
        return hmac.compare_digest(candidate.encode("utf-8"), self._pin.encode("utf-8"))


class TerminalContext:
    """Everything one unlocked terminal owns between login and logout."""

    def __init__(
        self,
        session: CashierSession,
        store: SqliteStore,
        emit_receipt: ReceiptEmitter,
        role: UserRole = UserRole.STAFF,
        access_authorizer: PinAuthorizer | None = None,
        auth_authorizer: PinAuthorizer | None = None,
    ) -> None:
        self._session: CashierSession | None = session
        self.store = store
        self.emit_receipt = emit_receipt
        self.role = role
        self.access_authorizer = access_authorizer or PinAuthorizer(config.ACCESS_PIN)
        self.auth_authorizer = auth_authorizer or PinAuthorizer(config.AUTH_PIN)
        self.order = Order()
        self.held_orders = HeldOrderRegistry()
        self.ledger = CashDrawerLedger(store)

    @classmethod
    def start(
        cls,
        cashier_name: str,
        store: SqliteStore,
        emit_receipt: ReceiptEmitter,
        role: UserRole = UserRole.STAFF,
        now: datetime | None = None,
        **authorizers: PinAuthorizer,
    ) -> Result:
        """Open a session for `cashier_name`; a blank name is rejected."""
        name = cashier_name.strip()
        if not name:
            return Result.failure(ValidationError("Cashier name is required."))
        started_at = now or datetime.now()
        session = CashierSession(
            session_id=new_session_id(name, started_at),
            cashier_name=name,
            started_at=started_at,
        )
        log_debug(f"session_start id={session.session_id} role={role.value}")
        return Result.success(cls(session, store, emit_receipt, role=role, **authorizers))

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def session(self) -> CashierSession:
        if self._session is None:
            raise RuntimeError("Terminal session has been torn down")
        return self._session

    def teardown(self) -> None:
        """Logout: drop the session and any unsaved order. Persisted records stay."""
        if self._session is None:
            return
        log_debug(f"session_teardown id={self._session.session_id} discarded_lines={len(self.order)}")
        self.order.clear()
        self.held_orders = HeldOrderRegistry()
        self._session = None
