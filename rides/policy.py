"""
Purpose: Central configuration for drop-off rewards (single source of truth).
What it does:

Stores all tunable reward thresholds:

BASE_POINTS = 10

METERS_PER_POINT = 10 (1 point lost per 10 m off the block)

FULL_REWARD_RADIUS_M = 50

REDUCED_REWARD_RADIUS_M = 100 (beyond this the ride goes to admin review)

Values can be overridden from the environment / .env file:
AERAS_BASE_POINTS, AERAS_METERS_PER_POINT,
AERAS_FULL_REWARD_RADIUS_M, AERAS_REDUCED_REWARD_RADIUS_M

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class RewardPolicy:
    """
    Central configuration for puller rewards.

    Notes:
    - award = max(0, base_points - distance / meters_per_point), 1 decimal
    - within full_reward_radius_m the audit line says a normal completion,
      up to reduced_reward_radius_m it says reduced points, past that the
      ride is held for review with nothing awarded.
    """

    # --- Award formula ---
    base_points: float = 10.0
    meters_per_point: float = 10.0

    # --- Classification radii (meters from the destination block) ---
    full_reward_radius_m: float = 50.0
    reduced_reward_radius_m: float = 100.0

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.base_points < 0:
            raise ValueError("base_points must be >= 0")

        if self.meters_per_point <= 0:
            raise ValueError("meters_per_point must be > 0")

        if self.full_reward_radius_m < 0:
            raise ValueError("full_reward_radius_m must be >= 0")

        if self.reduced_reward_radius_m < self.full_reward_radius_m:
            raise ValueError("reduced_reward_radius_m must be >= full_reward_radius_m")


def default_reward_policy() -> RewardPolicy:
    """
    Convenience factory for the default policy.
    """
    p = RewardPolicy()
    p.validate()
    return p


def reward_policy_from_env() -> RewardPolicy:
    """
    Default policy with any AERAS_* overrides found in the environment.
    """
    defaults = RewardPolicy()
    p = RewardPolicy(
        base_points=float(os.getenv("AERAS_BASE_POINTS", defaults.base_points)),
        meters_per_point=float(os.getenv("AERAS_METERS_PER_POINT", defaults.meters_per_point)),
        full_reward_radius_m=float(os.getenv("AERAS_FULL_REWARD_RADIUS_M", defaults.full_reward_radius_m)),
        reduced_reward_radius_m=float(os.getenv("AERAS_REDUCED_REWARD_RADIUS_M", defaults.reduced_reward_radius_m)),
    )
    p.validate()
    return p
