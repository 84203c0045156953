"""
Per-Division Write Serialization

All mutations of one division's pairings run one at a time:
- process-local lock keyed by division_id (threadpool workers)
- database row lock on the division (SELECT ... FOR UPDATE; no-op on SQLite)

The (division_id, game_number) unique constraint is the backstop across
processes; callers retry the allocation when it fires.
"""

import os
import threading
from contextlib import contextmanager
from typing import Dict, Iterator

from sqlmodel import Session, select

from pairing_engine.models.division import Division
from pairing_engine.services.errors import NotFoundError

PAIRING_WRITE_RETRIES = int(os.getenv("PAIRING_WRITE_RETRIES", "3"))

_registry_lock = threading.Lock()
# One lock per division ever written, kept for the life of the process.
# Divisions number in the hundreds at most, so entries are never evicted.
_division_locks: Dict[int, threading.Lock] = {}


def _lock_for(division_id: int) -> threading.Lock:
    with _registry_lock:
        lock = _division_locks.get(division_id)
        if lock is None:
            lock = threading.Lock()
            _division_locks[division_id] = lock
        return lock


@contextmanager
def division_write_lock(session: Session, division_id: int) -> Iterator[Division]:
    """
    Hold the division's write lock for the duration of the block.

    Yields:
        The locked Division row

    Raises:
        NotFoundError: Division does not exist
    """
    with _lock_for(division_id):
        division = session.exec(select(Division).where(Division.id == division_id).with_for_update()).first()
        if division is None:
            raise NotFoundError(f"Division {division_id} not found", context={"division_id": division_id})
        yield division
