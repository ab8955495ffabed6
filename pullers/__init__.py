"""
Pullers domain package.

Public API:
- Domain model: Puller
- Lookup policy: PullerPolicy
- Selection: filter_eligible_pullers, rank_nearby_pullers, NearbyPuller

Should not contain business logic.
"""
from .models import Puller
from .policy import PullerPolicy, default_puller_policy, puller_policy_from_env
from .selection import NearbyPuller, filter_eligible_pullers, rank_nearby_pullers

__all__ = ["Puller",
           "PullerPolicy",
           "default_puller_policy",
           "puller_policy_from_env",
           "NearbyPuller",
           "filter_eligible_pullers",
           "rank_nearby_pullers",
           ]
