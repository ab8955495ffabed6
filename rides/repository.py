"""
Purpose: Storage boundary for the ride core.
What it does:
- RideRepository: the capability set the core needs per entity
  (get / create / update / query), plus two write primitives:
   - increment_puller(): in-place point/ride-count increment
   - atomic(): a unit of work that applies fully or not at all
- InMemoryRideRepository: the process-local implementation used by the demo
  scripts and the test suite. A relational backend implements the same
  protocol with row increments and a DB transaction.

Rule: Repository owns storage and atomicity, the dispatcher owns transition rules.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterator, List, Optional, Protocol

from pullers.models import Puller
from .models import Location, PointsHistory, Ride, Rider


class RideRepository(Protocol):
    # --- locations ---
    def add_location(self, location: Location) -> Location: ...
    def get_location(self, location_id: str) -> Optional[Location]: ...
    def list_locations(self) -> List[Location]: ...

    # --- riders ---
    def add_rider(self, rider: Rider) -> Rider: ...
    def get_rider(self, rider_id: str) -> Optional[Rider]: ...
    def list_riders(self) -> List[Rider]: ...

    # --- pullers ---
    def add_puller(self, puller: Puller) -> Puller: ...
    def get_puller(self, puller_id: str) -> Optional[Puller]: ...
    def update_puller(self, puller: Puller) -> Puller: ...
    def increment_puller(self, puller_id: str, *, points: float = 0.0, rides: int = 0) -> Puller: ...
    def list_pullers(self) -> List[Puller]: ...
    def find_pullers(self, predicate: Callable[[Puller], bool]) -> List[Puller]: ...

    # --- rides ---
    def add_ride(self, ride: Ride) -> Ride: ...
    def get_ride(self, ride_id: str) -> Optional[Ride]: ...
    def update_ride(self, ride: Ride) -> Ride: ...
    def list_rides(self) -> List[Ride]: ...
    def find_rides(self, predicate: Callable[[Ride], bool]) -> List[Ride]: ...

    # --- ledger ---
    def append_points_history(self, entry: PointsHistory) -> PointsHistory: ...
    def points_history(self, puller_id: Optional[str] = None) -> List[PointsHistory]: ...

    def atomic(self): ...


@dataclass
class InMemoryRideRepository:
    """
    In-memory store keyed by id. Entities are frozen dataclasses, so a
    shallow copy of each dict is a complete snapshot for rollback.
    """
    _locations: Dict[str, Location] = field(default_factory=dict)
    _riders: Dict[str, Rider] = field(default_factory=dict)
    _pullers: Dict[str, Puller] = field(default_factory=dict)
    _rides: Dict[str, Ride] = field(default_factory=dict)

    # append-only, creation order
    _ledger: List[PointsHistory] = field(default_factory=list)

    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    # --- Unit of work ---

    @contextmanager
    def atomic(self) -> Iterator[InMemoryRideRepository]:
        """
        Hold the write lock for the whole block; on any exception restore
        every collection to what it was on entry and re-raise.
        """
        with self._lock:
            snapshot = (
                dict(self._locations),
                dict(self._riders),
                dict(self._pullers),
                dict(self._rides),
                len(self._ledger),
            )
            try:
                yield self
            except BaseException:
                locations, riders, pullers, rides, ledger_len = snapshot
                self._locations = locations
                self._riders = riders
                self._pullers = pullers
                self._rides = rides
                del self._ledger[ledger_len:]
                raise

    # --- Locations ---

    def add_location(self, location: Location) -> Location:
        with self._lock:
            self._insert(self._locations, location)
            return location

    def get_location(self, location_id: str) -> Optional[Location]:
        with self._lock:
            return self._locations.get(location_id)

    def list_locations(self) -> List[Location]:
        with self._lock:
            return list(self._locations.values())

    # --- Riders ---

    def add_rider(self, rider: Rider) -> Rider:
        with self._lock:
            self._insert(self._riders, rider)
            return rider

    def get_rider(self, rider_id: str) -> Optional[Rider]:
        with self._lock:
            return self._riders.get(rider_id)

    def list_riders(self) -> List[Rider]:
        with self._lock:
            return list(self._riders.values())

    # --- Pullers ---

    def add_puller(self, puller: Puller) -> Puller:
        with self._lock:
            self._insert(self._pullers, puller)
            return puller

    def get_puller(self, puller_id: str) -> Optional[Puller]:
        with self._lock:
            return self._pullers.get(puller_id)

    def update_puller(self, puller: Puller) -> Puller:
        with self._lock:
            self._replace(self._pullers, puller)
            return puller

    def increment_puller(self, puller_id: str, *, points: float = 0.0, rides: int = 0) -> Puller:
        """
        Read and write under the same lock so concurrent completions for
        one puller cannot lose an update.
        """
        with self._lock:
            current = self._pullers.get(puller_id)
            if current is None:
                raise KeyError(puller_id)
            updated = replace(
                current,
                points=current.points + points,
                total_rides=current.total_rides + rides,
            )
            self._pullers[puller_id] = updated
            return updated

    def list_pullers(self) -> List[Puller]:
        with self._lock:
            return list(self._pullers.values())

    def find_pullers(self, predicate: Callable[[Puller], bool]) -> List[Puller]:
        with self._lock:
            return [puller for puller in self._pullers.values() if predicate(puller)]

    # --- Rides ---

    def add_ride(self, ride: Ride) -> Ride:
        with self._lock:
            self._insert(self._rides, ride)
            return ride

    def get_ride(self, ride_id: str) -> Optional[Ride]:
        with self._lock:
            return self._rides.get(ride_id)

    def update_ride(self, ride: Ride) -> Ride:
        with self._lock:
            self._replace(self._rides, ride)
            return ride

    def list_rides(self) -> List[Ride]:
        with self._lock:
            return list(self._rides.values())

    def find_rides(self, predicate: Callable[[Ride], bool]) -> List[Ride]:
        with self._lock:
            return [ride for ride in self._rides.values() if predicate(ride)]

    # --- Ledger ---

    def append_points_history(self, entry: PointsHistory) -> PointsHistory:
        with self._lock:
            self._ledger.append(entry)
            return entry

    def points_history(self, puller_id: Optional[str] = None) -> List[PointsHistory]:
        with self._lock:
            if puller_id is None:
                return list(self._ledger)
            return [entry for entry in self._ledger if entry.puller_id == puller_id]

    # --- helpers ---

    @staticmethod
    def _insert(table: dict, entity) -> None:
        if entity.id in table:
            raise ValueError(f"duplicate id {entity.id!r}")
        table[entity.id] = entity

    @staticmethod
    def _replace(table: dict, entity) -> None:
        if entity.id not in table:
            raise KeyError(entity.id)
        table[entity.id] = entity
