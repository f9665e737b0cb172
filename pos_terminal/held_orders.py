"""Suspended orders the cashier can recall later."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Iterator

from pos_terminal.config import DEFAULT_CUSTOMER_LABEL
from pos_terminal.debug_log import log_debug
from pos_terminal.errors import NotFoundError, Result, ValidationError
from pos_terminal.models import HeldOrder
from pos_terminal.order import Order


class HeldOrderRegistry:
    """Held orders in the order they were suspended."""

    def __init__(self) -> None:
        self._held: list[HeldOrder] = []
        self._last_id = 0
        self.selected_id: int | None = None

    def __len__(self) -> int:
        return len(self._held)

    def __iter__(self) -> Iterator[HeldOrder]:
        return iter(list(self._held))

    def _next_id(self) -> int:
        # Millisecond clock, bumped so two holds in the same tick never collide.
        self._last_id = max(int(time.time() * 1000), self._last_id + 1)
        return self._last_id

    def hold(self, order: Order, customer_label: str = DEFAULT_CUSTOMER_LABEL) -> Result:
        """Snapshot `order` into the registry and clear it."""
        if order.is_empty:
            return Result.failure(ValidationError("Nothing to hold."))

        held = HeldOrder(
            id=self._next_id(),
            lines=order.snapshot(),
            total=order.grand_total(),
            customer_label=customer_label.strip() or DEFAULT_CUSTOMER_LABEL,
            suspended_at=datetime.now(timezone.utc),
        )
        self._held.append(held)
        order.clear()
        log_debug(f"hold id={held.id} lines={len(held.lines)} total={held.total}")
        return Result.success(held)

    def search(self, query: str) -> list[HeldOrder]:
        needle = query.strip().lower()
        if not needle:
            return list(self._held)
        matches = []
        for held in self._held:
            first_name = held.lines[0].name.lower() if held.lines else ""
            if needle in held.customer_label.lower() or needle in first_name:
                matches.append(held)
        return matches

    def get(self, held_id: int) -> HeldOrder | None:
        for held in self._held:
            if held.id == held_id:
                return held
        return None

    def recall(self, held_id: int, order: Order) -> Result:
        """Move a held order back into `order`, replacing whatever it contained."""
        held = self.get(held_id)
        if held is None:
            return Result.failure(NotFoundError(f"Held order {held_id} not found."))

        discarded = len(order)
        order.replace_lines(held.lines)
        self._held = [h for h in self._held if h.id != held_id]
        if self.selected_id == held_id:
            self.selected_id = None
        log_debug(f"recall id={held_id} lines={len(held.lines)} discarded_active_lines={discarded}")
        return Result.success(held)

    def reset_selection(self) -> None:
        self.selected_id = None
