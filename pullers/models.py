"""
Purpose: Core data models for the pullers domain.
What it does:
Defines the structure of a rickshaw Puller and their availability without
relying on any ORM constraints.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple
import uuid

LatLon = Tuple[float, float]


@dataclass(frozen=True)
class Puller:
    """
    A purely stateless representation of a Puller at a specific point in time.

    `location` stays None until the first location report.
    `points` only moves through ride completions and admin adjustments,
    each of which leaves a ledger entry.
    """
    id: str
    name: str
    phone: str
    location: Optional[LatLon] = None
    is_online: bool = False

    points: float = 0.0
    total_rides: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def has_location(self) -> bool:
        return self.location is not None

    @classmethod
    def new(
        cls,
        name: str,
        phone: str,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        is_online: bool = False,
        puller_id: Optional[str] = None,
    ) -> Puller:
        location = None
        if lat is not None and lon is not None:
            location = (float(lat), float(lon))

        return cls(
            id=puller_id or f"puller_{uuid.uuid4().hex}",
            name=name,
            phone=phone,
            location=location,
            is_online=is_online,
        )
