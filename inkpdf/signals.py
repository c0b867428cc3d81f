"""Minimal observable notifications (loading, saving, document changes).

Slots are plain callables. Emitting never blocks on the observers: a slot
that raises is logged and the remaining slots still run.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List

logger = logging.getLogger(__name__)


class Signal:
    def __init__(self, name: str = "") -> None:
        self.name = name
        self._slots: List[Callable[..., Any]] = []

    def connect(self, slot: Callable[..., Any]) -> None:
        if slot not in self._slots:
            self._slots.append(slot)

    def disconnect(self, slot: Callable[..., Any]) -> None:
        if slot in self._slots:
            self._slots.remove(slot)

    def emit(self, *args: Any) -> None:
        for slot in list(self._slots):
            try:
                slot(*args)
            except Exception:
                logger.exception("Slot %r failed while handling signal '%s'", slot, self.name)

    def __len__(self) -> int:
        return len(self._slots)
