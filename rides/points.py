"""
Purpose: Drop-off accuracy scoring (the "how many points" layer).
What it does:
- calculate_points: distance from block -> awarded points
- classify_dropoff: distance -> (award, points status, audit description)

Pure functions. Applying the result to a puller and the ledger is the
dispatcher's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from .models import PointsStatus
from .policy import RewardPolicy, default_reward_policy


def round_half_up(value: float, places: int = 1) -> float:
    """
    Round like a cashier does (2.25 -> 2.3), not banker's rounding.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def calculate_points(distance_m: float, policy: Optional[RewardPolicy] = None) -> float:
    """
    base - distance / meters_per_point, floored at 0 and rounded to 1 decimal.

    >>> calculate_points(0)
    10.0
    >>> calculate_points(45)
    5.5
    """
    policy = policy or default_reward_policy()

    penalty = distance_m / policy.meters_per_point
    awarded = max(0.0, policy.base_points - penalty)
    return round_half_up(awarded, 1)


@dataclass(frozen=True)
class DropoffOutcome:
    """
    What a completion is worth.
    `rewarded` is False for rides parked for admin review.
    """
    points: float
    points_status: PointsStatus
    description: str

    @property
    def rewarded(self) -> bool:
        return self.points_status == PointsStatus.REWARDED


def classify_dropoff(distance_m: float, policy: Optional[RewardPolicy] = None) -> DropoffOutcome:
    policy = policy or default_reward_policy()

    if distance_m <= policy.full_reward_radius_m:
        points = calculate_points(distance_m, policy)
        return DropoffOutcome(
            points=points,
            points_status=PointsStatus.REWARDED,
            description=f"Ride completed - {points} points",
        )

    if distance_m <= policy.reduced_reward_radius_m:
        points = calculate_points(distance_m, policy)
        return DropoffOutcome(
            points=points,
            points_status=PointsStatus.REWARDED,
            description=f"Ride completed (reduced points) - {points} points",
        )

    return DropoffOutcome(
        points=0.0,
        points_status=PointsStatus.UNDER_REVIEW,
        description=f"Drop-off {round(distance_m)} m from block - held for review",
    )
