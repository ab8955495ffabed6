"""
Rides domain package.

Public API:
- Domain models: Location, Rider, Ride, PointsHistory
- Enums: RideStatus, PointsStatus, LedgerKind, RiderCategory
- Rewards: RewardPolicy, calculate_points, classify_dropoff
- Storage: RideRepository, InMemoryRideRepository

Should not contain business logic.
"""
from .models import (
    Location,
    LedgerKind,
    PointsHistory,
    PointsStatus,
    Ride,
    Rider,
    RiderCategory,
    RideStatus,
)
from .policy import RewardPolicy, default_reward_policy, reward_policy_from_env
from .points import DropoffOutcome, calculate_points, classify_dropoff
from .repository import InMemoryRideRepository, RideRepository

__all__ = ["Location",
           "LedgerKind",
           "PointsHistory",
           "PointsStatus",
           "Ride",
           "Rider",
           "RiderCategory",
           "RideStatus",
           "RewardPolicy",
           "default_reward_policy",
           "reward_policy_from_env",
           "DropoffOutcome",
           "calculate_points",
           "classify_dropoff",
           "InMemoryRideRepository",
           "RideRepository",
           ]
