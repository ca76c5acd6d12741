"""
Pytest configuration and fixtures for netquality_dash tests.
"""

import pytest


def rec(**kw):
    """One raw record with sensible defaults."""
    base = {
        "state": "Maharashtra",
        "city": "Mumbai",
        "area": "Andheri",
        "operator": "Jio",
        "network_type": "4G",
        "year": 2023,
        "month": 1,
        "hour": 10,
        "is_peak_hour": 0,
        "download_mbps": 50.0,
        "upload_mbps": 10.0,
        "latency_ms": 40.0,
        "confidence_score": 0.5,
        "latitude": 19.11,
        "longitude": 72.87,
    }
    base.update(kw)
    return base


@pytest.fixture
def make_record():
    return rec


@pytest.fixture
def raw_records():
    """
    Small dataset across two states:
      Maharashtra / Mumbai / {Andheri, Bandra}, Maharashtra / Pune / Kothrud,
      Karnataka / Bengaluru / Whitefield
    """
    return [
        rec(area="Andheri", operator="Jio", download_mbps=60, upload_mbps=20, latency_ms=30,
            confidence_score=0.9, is_peak_hour=1, year=2022, hour=9),
        rec(area="Andheri", operator="jio", download_mbps=40, upload_mbps=10, latency_ms=50,
            confidence_score=0.7, year=2023, network_type="5G"),
        rec(area="Andheri", operator="AIRTEL", download_mbps=30, upload_mbps=8, latency_ms=70,
            confidence_score=0.4, year=2023),
        rec(area="Bandra", operator="Airtel", download_mbps=80, upload_mbps=25, latency_ms=20,
            confidence_score=0.8, latitude=19.06, longitude=72.83, is_peak_hour=1, month=2),
        rec(area="Bandra", operator="VI", download_mbps=20, upload_mbps=5, latency_ms=90,
            confidence_score=0.3, latitude=19.06, longitude=72.83, month=2),
        rec(city="Pune", area="Kothrud", operator="VI", download_mbps=25, upload_mbps=6, latency_ms=80,
            confidence_score=0.6, latitude=18.51, longitude=73.81, year=2024),
        rec(state="Karnataka", city="Bengaluru", area="Whitefield", operator="Jio", download_mbps=100,
            upload_mbps=30, latency_ms=25, confidence_score=0.85, latitude=12.97, longitude=77.75,
            network_type="5G", year=2024, hour=20, is_peak_hour=1),
        rec(state="Karnataka", city="Bengaluru", area="Whitefield", operator="Airtel", download_mbps=70,
            upload_mbps=18, latency_ms=35, confidence_score=0.75, latitude=12.97, longitude=77.75,
            year=2024),
    ]


@pytest.fixture
def store(raw_records):
    from netquality_dash.store import RecordStore

    s = RecordStore()
    s.load(raw_records)
    return s


@pytest.fixture
def frame(store):
    return store.records
