"""
Purpose: Central configuration for Puller lookup.
What it does:

Stores the tunable caps for finding pullers near a pickup:

NEARBY_LIMIT = 5
RECENT_HISTORY_LIMIT = 10

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class PullerPolicy:
    """
    Central configuration for puller lookup and profile pages.
    """

    # --- Nearby lookup ---
    # How many of the closest online pullers a rider's request is shown to.
    nearby_limit: int = 5

    # --- Profile ---
    # Ledger lines and rides returned on a puller's profile, newest first.
    recent_history_limit: int = 10
    recent_rides_limit: int = 10

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.nearby_limit <= 0:
            raise ValueError("nearby_limit must be > 0")

        if self.recent_history_limit < 0 or self.recent_rides_limit < 0:
            raise ValueError("recent limits must be >= 0")


def default_puller_policy() -> PullerPolicy:
    """
    Convenience factory for the default policy.
    """
    p = PullerPolicy()
    p.validate()
    return p


def puller_policy_from_env() -> PullerPolicy:
    p = PullerPolicy(nearby_limit=int(os.getenv("AERAS_NEARBY_LIMIT", PullerPolicy.nearby_limit)))
    p.validate()
    return p
