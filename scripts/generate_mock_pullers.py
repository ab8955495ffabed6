import csv
import random

def generate_mock_pullers(filename="mock_pullers_50.csv", count=50):
    # Base coordinate is the CUET campus block from sampledata/locations.csv.
    # The four campus blocks all sit within ~2km of it.
    base_lat = 22.4633
    base_lon = 91.9714

    with open(filename, mode='w', newline='') as file:
        writer = csv.writer(file)
        writer.writerow(["puller_id", "name", "phone", "lat", "lon", "is_online"])

        for i in range(count):
            puller_id = f"PUL-{str(i+1).zfill(3)}"

            # 90% have reported a location, scattered around campus (roughly +/- 1.5km)
            if random.random() < 0.9:
                lat = round(base_lat + (random.random() - 0.5) * 0.03, 6)
                lon = round(base_lon + (random.random() - 0.5) * 0.03, 6)
            else:
                lat, lon = "", ""

            # 75% chance of being online
            is_online = "true" if random.random() < 0.75 else "false"

            phone = f"+8801{random.randint(300000000, 999999999)}"

            writer.writerow([puller_id, f"Puller {i+1}", phone, lat, lon, is_online])

    print(f"Successfully generated {count} mock pullers into '{filename}'.")

if __name__ == "__main__":
    generate_mock_pullers()
