# src/dayline/core/runtime.py

from __future__ import annotations

import time
import uuid
from datetime import datetime


class SystemClock:
    """Clock backed by the local wall clock."""

    def now_minutes(self) -> int:
        now = datetime.now()
        return now.hour * 60 + now.minute

    def now_ts(self) -> float:
        return time.time()


class UuidIdSource:
    def new_id(self) -> str:
        return uuid.uuid4().hex
