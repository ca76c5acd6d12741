import json
import os

import numpy as np

# state -> city -> [(area, lat, lon)]
GEO = {
    "Maharashtra": {
        "Mumbai": [("Andheri", 19.1136, 72.8697), ("Bandra", 19.0596, 72.8295), ("Dadar", 19.0178, 72.8478)],
        "Pune": [("Hinjewadi", 18.5913, 73.7389), ("Kothrud", 18.5074, 73.8077)],
    },
    "Karnataka": {
        "Bengaluru": [("Whitefield", 12.9698, 77.7500), ("Koramangala", 12.9352, 77.6245)],
        "Mysuru": [("Gokulam", 12.3299, 76.6300)],
    },
    "Delhi": {
        "New Delhi": [("Connaught Place", 28.6315, 77.2167), ("Dwarka", 28.5921, 77.0460)],
    },
    "Tamil Nadu": {
        "Chennai": [("T Nagar", 13.0418, 80.2341), ("Adyar", 13.0012, 80.2565)],
    },
}

# operator -> (download mean 4G, upload mean 4G, latency mean, score mean)
OPERATORS = {
    "Airtel": (48.0, 14.0, 42.0, 0.66),
    "Jio": (55.0, 16.0, 38.0, 0.71),
    "VI": (32.0, 9.0, 58.0, 0.47),
}
YEARS = (2022, 2023, 2024)
PEAK_HOURS = set(range(9, 12)) | set(range(18, 23))
N_PER_AREA = 120
OUT = "data/data.json"


def build_records(seed: int = 7) -> list:
    rng = np.random.default_rng(seed)
    rows = []
    for state, cities in GEO.items():
        for city, areas in cities.items():
            for area, lat, lon in areas:
                for _ in range(N_PER_AREA):
                    op = rng.choice(list(OPERATORS))
                    dl, ul, lt, sc = OPERATORS[op]
                    year = int(rng.choice(YEARS))
                    net = "5G" if rng.random() < 0.15 + 0.2 * YEARS.index(year) else "4G"
                    hour = int(rng.integers(0, 24))
                    peak = hour in PEAK_HOURS
                    boost = 3.2 if net == "5G" else 1.0
                    slow = 0.75 if peak else 1.0
                    rows.append({
                        "state": state,
                        "city": city,
                        "area": area,
                        "operator": op,
                        "network_type": net,
                        "year": year,
                        "month": int(rng.integers(1, 13)),
                        "hour": hour,
                        "is_peak_hour": int(peak),
                        "download_mbps": round(max(0.5, rng.normal(dl * boost * slow, dl * 0.25)), 2),
                        "upload_mbps": round(max(0.2, rng.normal(ul * boost * slow, ul * 0.25)), 2),
                        "latency_ms": round(max(5.0, rng.normal(lt / (1.8 if net == "5G" else 1.0) / slow, 8.0)), 1),
                        "confidence_score": round(float(np.clip(rng.normal(sc, 0.12), 0, 1)), 2),
                        "latitude": lat,
                        "longitude": lon,
                    })
    return rows


def main():
    os.makedirs("data", exist_ok=True)
    rows = build_records()
    with open(OUT, "w", encoding="utf-8") as fh:
        json.dump(rows, fh)
    print(f"Saved {len(rows):,} records to {OUT}")


if __name__ == "__main__":
    main()
