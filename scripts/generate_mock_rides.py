import pandas as pd
import numpy as np
import uuid
from datetime import datetime, timezone, timedelta

def generate_mock_rides(num_rides=200, locations_file="sampledata/locations.csv",
                        riders_file="sampledata/riders.csv", output_file="ride_requests_generated.csv"):
    """
    Generates a dataset of ride requests between the campus blocks.
    Each request carries the drop-off point the puller will report, scattered
    around the destination block so that every reward band shows up:
    most land within 50m, some within 100m, a few far enough to need review.
    """
    locations = pd.read_csv(locations_file)
    riders = pd.read_csv(riders_file)

    # ~1 degree of latitude is ~111km
    METERS_PER_DEGREE = 111_320.0

    data = []
    now = datetime.now(timezone.utc)

    for ride_index in range(num_rides):
        pickup, destination = locations.sample(n=2, replace=False).itertuples(index=False)
        rider = riders.sample(n=1).iloc[0]

        # Drop-off offset in meters: 70% tight, 20% sloppy, 10% far off
        band = np.random.choice(["tight", "sloppy", "far"], p=[0.7, 0.2, 0.1])
        if band == "tight":
            offset_m = np.random.uniform(0, 50)
        elif band == "sloppy":
            offset_m = np.random.uniform(50, 100)
        else:
            offset_m = np.random.uniform(100, 400)

        bearing = np.random.uniform(0, 2 * np.pi)
        dropoff_lat = destination.lat + (offset_m * np.cos(bearing)) / METERS_PER_DEGREE
        dropoff_lon = destination.lon + (offset_m * np.sin(bearing)) / (
            METERS_PER_DEGREE * np.cos(np.radians(destination.lat))
        )

        data.append({
            "request_id": f"r_{str(uuid.uuid4())[:8]}",
            "requested_at": (now - timedelta(minutes=int(np.random.randint(0, 120)))).isoformat(),
            "rider_id": rider["rider_id"],
            "pickup_location_id": pickup.location_id,
            "destination_location_id": destination.location_id,
            "dropoff_lat": np.round(dropoff_lat, 6),
            "dropoff_lon": np.round(dropoff_lon, 6),
            "intended_offset_m": np.round(offset_m, 1),
            # some requests never get past the rider's screen
            "outcome": np.random.choice(["complete", "cancel", "reject"], p=[0.85, 0.1, 0.05]),
        })

    df = pd.DataFrame(data)
    df.to_csv(output_file, index=False)
    print(f"✅ Generated {num_rides} ride requests and saved to '{output_file}'")

    print("\nTop destinations:")
    counts = df["destination_location_id"].value_counts().head(5)
    for location_id, count in counts.items():
        print(f"  {location_id}: {count} requests")

if __name__ == "__main__":
    generate_mock_rides(num_rides=200)
