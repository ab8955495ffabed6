#Read-side reducers for the admin dashboard.
#No state, no writes.

from .aggregator import (
    DestinationCount,
    LeaderboardEntry,
    StatsSnapshot,
    average_completion_time_minutes,
    average_wait_time_seconds,
    compute_stats,
    most_requested_destinations,
    puller_leaderboard,
)

__all__ = [
    "DestinationCount",
    "LeaderboardEntry",
    "StatsSnapshot",
    "average_completion_time_minutes",
    "average_wait_time_seconds",
    "compute_stats",
    "most_requested_destinations",
    "puller_leaderboard",
]
