import csv
import logging
import os
from typing import Optional

import pandas as pd

from dispatch import RideDispatcher, RideError, RideEvent
from pullers.models import Puller
from pullers.policy import puller_policy_from_env
from rides.models import Location, Rider
from rides.policy import reward_policy_from_env
from rides.repository import InMemoryRideRepository

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _as_bool(value) -> bool:
    return str(value).strip().lower() in {"true", "1", "yes"}


def load_campus(repository: InMemoryRideRepository, data_dir: str = "sampledata") -> None:
    """
    Seed locations, riders and pullers from the CSVs in `data_dir`.
    """
    data_dir = os.path.join(BASE_DIR, data_dir)

    locations = pd.read_csv(os.path.join(data_dir, "locations.csv"))
    for row in locations.itertuples(index=False):
        repository.add_location(
            Location(id=row.location_id, name=row.name, latitude=float(row.lat),
                     longitude=float(row.lon), block_id=row.block_id)
        )

    riders = pd.read_csv(os.path.join(data_dir, "riders.csv"))
    for row in riders.itertuples(index=False):
        repository.add_rider(
            Rider.new(row.name, int(row.age), row.category,
                      privilege_verified=_as_bool(row.privilege_verified), rider_id=row.rider_id)
        )

    # phone must stay a string, lat/lon may be blank for pullers who never reported
    pullers = pd.read_csv(os.path.join(data_dir, "pullers.csv"), dtype={"phone": str})
    for row in pullers.itertuples(index=False):
        lat = None if pd.isna(row.lat) else float(row.lat)
        lon = None if pd.isna(row.lon) else float(row.lon)
        repository.add_puller(
            Puller.new(row.name, row.phone, lat=lat, lon=lon,
                       is_online=_as_bool(row.is_online), puller_id=row.puller_id)
        )


def load_requests(filepath: Optional[str] = None, limit: int = 30) -> pd.DataFrame:
    """
    Ride requests from generate_mock_rides.py, or a small built-in set if
    that file has not been generated yet.
    """
    filepath = filepath or os.path.join(BASE_DIR, "ride_requests_generated.csv")
    if os.path.exists(filepath):
        return pd.read_csv(filepath).head(limit)

    return pd.DataFrame([
        {"request_id": "demo_1", "rider_id": "user_1", "pickup_location_id": "loc_1",
         "destination_location_id": "loc_2", "dropoff_lat": 22.4725, "dropoff_lon": 91.9845, "outcome": "complete"},
        {"request_id": "demo_2", "rider_id": "user_2", "pickup_location_id": "loc_1",
         "destination_location_id": "loc_3", "dropoff_lat": 22.4583, "dropoff_lon": 91.9922, "outcome": "complete"},
        {"request_id": "demo_3", "rider_id": "user_3", "pickup_location_id": "loc_2",
         "destination_location_id": "loc_4", "dropoff_lat": 22.4535, "dropoff_lon": 91.9660, "outcome": "complete"},
        {"request_id": "demo_4", "rider_id": "user_1", "pickup_location_id": "loc_3",
         "destination_location_id": "loc_1", "dropoff_lat": 22.4633, "dropoff_lon": 91.9714, "outcome": "cancel"},
    ])


def run_simulation():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    print("=== STARTING CAMPUS RIDE SIMULATION ===")

    # 1. Load Data
    repository = InMemoryRideRepository()
    load_campus(repository)
    requests = load_requests()
    print(f"Loaded {len(repository.list_locations())} Blocks, {len(repository.list_pullers())} Pullers "
          f"and {len(requests)} Ride Requests.\n")

    # 2. Configure System
    dispatcher = RideDispatcher(
        repository,
        reward_policy=reward_policy_from_env(),
        puller_policy=puller_policy_from_env(),
    )

    output_path = os.path.join(BASE_DIR, "ride_results.csv")
    completed = 0
    failed = 0

    with open(output_path, "w", newline='') as file:
        writer = csv.writer(file)
        writer.writerow(["request_id", "ride_id", "puller_id", "status", "distance_from_block_m",
                         "points_awarded", "points_status"])

        for request in requests.itertuples(index=False):
            try:
                ride = dispatcher.create_ride(request.rider_id, request.pickup_location_id,
                                              request.destination_location_id)

                if request.outcome == "reject":
                    ride = dispatcher.transition_ride(ride.id, RideEvent.REJECT)
                    writer.writerow([request.request_id, ride.id, "", ride.status.value, "", "", ride.points_status.value])
                    continue

                # 3. Offer the ride to the closest online pullers; the nearest one accepts.
                candidates = dispatcher.nearby_pullers(ride.pickup_coordinates)
                if not candidates:
                    print(f"[FAILED] {request.request_id} -> No online pullers near pickup.")
                    failed += 1
                    continue

                winner = candidates[0].puller
                ride = dispatcher.transition_ride(ride.id, RideEvent.ACCEPT, winner.phone)

                if request.outcome == "cancel":
                    ride = dispatcher.transition_ride(ride.id, RideEvent.CANCEL)
                else:
                    ride = dispatcher.transition_ride(ride.id, RideEvent.CONFIRM_PICKUP, winner.id)
                    ride = dispatcher.transition_ride(
                        ride.id, RideEvent.COMPLETE, winner.id,
                        {"latitude": float(request.dropoff_lat), "longitude": float(request.dropoff_lon)},
                    )
                    completed += 1
                    print(f"[SUCCESS] {request.request_id} -> {winner.name}: "
                          f"{ride.distance_from_block:.1f}m off block, {ride.points_awarded} pts ({ride.points_status.value})")

                writer.writerow([
                    request.request_id, ride.id, ride.puller_id, ride.status.value,
                    "" if ride.distance_from_block is None else round(ride.distance_from_block, 1),
                    "" if ride.points_awarded is None else ride.points_awarded,
                    ride.points_status.value,
                ])
            except RideError as error:
                failed += 1
                print(f"[FAILED] {request.request_id} -> {error.kind}: {error.detail}")

    # 4. Dashboard
    stats = dispatcher.compute_stats()
    print("\n=== SIMULATION COMPLETE ===")
    print(f"Rides Completed: {completed} / {len(requests)} (failed: {failed})")
    print(f"Pending Reviews: {stats.pending_reviews}")
    print(f"Avg Wait: {stats.avg_wait_time_seconds}s | Avg Completion: {stats.avg_completion_time_minutes} min")
    print("\n--- Leaderboard ---")
    for rank, entry in enumerate(stats.puller_leaderboard, 1):
        print(f"  {rank}. {entry.name}: {entry.points:.1f} pts over {entry.total_rides} rides")
    print(f"\nResults written to '{output_path}'.")


if __name__ == "__main__":
    run_simulation()
