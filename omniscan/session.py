"""Scan records and the per-session history that owns them."""

from __future__ import annotations

import copy
import threading
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

from .categories import ScanCategory


class ScanState(str, Enum):
    IDLE = "idle"
    AWAITING_PROVIDER = "awaiting_provider"
    PARSING = "parsing"
    RECORDED = "recorded"
    FAILED = "failed"


class ScanInProgress(RuntimeError):
    """A scan is already in flight for this session."""


class ScanRecord:
    """A completed scan; read-only once built.

    ``details`` is deep-copied on the way in and every read returns a fresh
    deep copy, so neither the provider payload nor a caller can alter the
    record held in history.
    """

    __slots__ = ("category", "image", "summary", "id", "timestamp", "_details")

    def __init__(
        self,
        category: ScanCategory,
        image: str,  # the submitted image string (data URI or bare base64)
        summary: str,
        details: Mapping[str, Any] | None = None,
        *,
        id: str | None = None,
        timestamp: datetime | None = None,
    ) -> None:
        values = {
            "category": category,
            "image": image,
            "summary": summary,
            "id": id or uuid.uuid4().hex,
            "timestamp": timestamp or datetime.now(timezone.utc),
            "_details": copy.deepcopy(dict(details or {})),
        }
        for name, value in values.items():
            object.__setattr__(self, name, value)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"ScanRecord is read-only: cannot set {name!r}")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"ScanRecord is read-only: cannot delete {name!r}")

    def __repr__(self) -> str:
        return (
            f"ScanRecord(id={self.id!r}, category={self.category.value}, "
            f"summary={self.summary!r})"
        )

    @property
    def details(self) -> dict[str, Any]:
        return copy.deepcopy(self._details)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "category": self.category.value,
            "summary": self.summary,
            "details": self.details,
        }


def format_details(details: Mapping[str, Any]) -> list[str]:
    """Render details as labelled lines, one bullet per list item."""
    lines: list[str] = []
    for key, value in details.items():
        lines.append(key.replace("_", " ").upper())
        if isinstance(value, list):
            lines.extend(f"  • {item}" for item in value)
        elif isinstance(value, dict):
            lines.extend(f"  {k.replace('_', ' ')}: {v}" for k, v in value.items())
        else:
            lines.append(f"  {value}")
    return lines


class ScanSession:
    """History and in-flight guard for one user session.

    Sessions are independent of each other; each one serializes access to
    its own history with a lock so it can be shared across threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._history: list[ScanRecord] = []
        self._state = ScanState.IDLE

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state in (ScanState.AWAITING_PROVIDER, ScanState.PARSING)

    @property
    def history(self) -> list[ScanRecord]:
        """Snapshot of the history, most recent first."""
        with self._lock:
            return list(self._history)

    def __len__(self) -> int:
        with self._lock:
            return len(self._history)

    def begin(self) -> None:
        """Enter AWAITING_PROVIDER, or raise if a scan is already running."""
        with self._lock:
            if self.busy:
                raise ScanInProgress("Um escaneamento já está em andamento.")
            self._state = ScanState.AWAITING_PROVIDER

    def transition(self, state: ScanState) -> None:
        with self._lock:
            self._state = state

    def record(self, record: ScanRecord) -> None:
        """Prepend *record* and mark the scan RECORDED."""
        with self._lock:
            self._history.insert(0, record)
            self._state = ScanState.RECORDED

    def reset(self) -> None:
        with self._lock:
            self._state = ScanState.IDLE

    def clear(self) -> None:
        with self._lock:
            self._history.clear()
