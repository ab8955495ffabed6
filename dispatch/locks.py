"""
Purpose: Per-key mutual exclusion for ride mutations.
What it does:
Hands out one lock per key (e.g. "ride:<id>") so that accept/confirm/complete/
cancel/adjust on the same ride run one at a time, while different rides
proceed in parallel. Single-process stand-in for a distributed lock.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class RideLockManager:
    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def lock(self, key: str) -> Iterator[None]:
        lock = self._lock_for(key)
        with lock:
            yield
