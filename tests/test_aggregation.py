"""
Aggregation engine tests: bucket counts/sums, zero-filling, chart groupings and series.
"""

import pandas as pd
import pytest

from netquality_dash.aggregation import (
    NON_PEAK,
    PEAK,
    aggregate,
    area_summaries,
    chart_data,
    coverage_by_year_network,
    download_by_city_operator,
    download_by_operator_peak,
    download_by_year_operator,
    hourly_download_by_operator,
    latency_by_city_network,
    latency_by_peak_operator,
    latency_by_year_peak,
    nest,
    score_by_operator,
    series_frame,
    to_series,
)
from netquality_dash.errors import InvalidFilterDimensionError
from netquality_dash.models import AggregationBucket


class TestAggregate:
    """Core group-by: count and per-measure sums per composite key."""

    @pytest.mark.parametrize("group_by", [
        ["operator"], ["city", "network_type"], ["year", "operator"], ["area", "operator", "network_type"],
    ])
    def test_counts_sum_to_input_size(self, frame, group_by):
        buckets = aggregate(frame, group_by, ["download_mbps"])
        assert sum(b.count for b in buckets.values()) == len(frame)

    def test_sums_and_averages(self, frame):
        buckets = aggregate(frame, ["operator"], ["confidence_score"])
        assert list(buckets) == [("AIRTEL",), ("JIO",), ("VI",)]
        assert buckets[("JIO",)].count == 3
        assert buckets[("JIO",)].sum("confidence_score") == pytest.approx(2.45)
        assert buckets[("AIRTEL",)].average("confidence_score") == pytest.approx(0.65)
        assert buckets[("VI",)].average("confidence_score") == pytest.approx(0.45)

    def test_keys_are_plain_python_values(self, frame):
        buckets = aggregate(frame, ["year"])
        assert set(buckets) == {(2022,), (2023,), (2024,)}
        assert all(type(k[0]) is int for k in buckets)

    def test_empty_frame_gives_no_buckets(self, frame):
        assert aggregate(frame.iloc[0:0], ["operator"], ["download_mbps"]) == {}

    def test_missing_measure_counts_as_zero(self, frame):
        buckets = aggregate(frame.drop(columns=["upload_mbps"]), ["operator"], ["upload_mbps"])
        assert all(b.sum("upload_mbps") == 0.0 for b in buckets.values())

    def test_non_numeric_values_count_as_zero(self):
        df = pd.DataFrame({"g": ["a", "a"], "m": ["x", 2]})
        b = aggregate(df, ["g"], ["m"])[("a",)]
        assert b.count == 2
        assert b.sum("m") == 2.0
        assert b.average("m") == 1.0

    def test_dimension_can_also_be_a_measure(self, frame):
        buckets = aggregate(frame, ["year"], ["year", "download_mbps"])
        assert buckets[(2024,)].count == 3
        assert buckets[(2024,)].sum("year") == 3 * 2024
        assert buckets[(2024,)].average("year") == 2024
        assert buckets[(2024,)].sum("download_mbps") == pytest.approx(195.0)

    def test_unknown_dimension(self, frame):
        with pytest.raises(InvalidFilterDimensionError):
            aggregate(frame, ["region"])

    def test_needs_a_dimension(self, frame):
        with pytest.raises(ValueError):
            aggregate(frame, [])


class TestBucket:

    def test_empty_bucket_average_is_zero(self):
        b = AggregationBucket(key=("x",))
        assert b.average("download_mbps") == 0.0
        assert b.as_dict("download_mbps") == {"sum": 0.0, "count": 0}


class TestNest:

    def test_absent_cells_are_zero_filled(self):
        buckets = {
            ("a", "x"): AggregationBucket(("a", "x"), 2, {"m": 4.0}),
            ("b", "y"): AggregationBucket(("b", "y"), 1, {"m": 1.0}),
        }
        out = nest(buckets)
        assert list(out) == ["a", "b"]
        assert list(out["a"]) == ["x", "y"]
        assert out["a"]["y"].count == 0
        assert out["a"]["y"].average("m") == 0.0
        assert out["a"]["x"].average("m") == 2.0


class TestAdminGroupings:

    def test_download_by_operator_peak(self, frame):
        out = download_by_operator_peak(frame)
        assert list(out["JIO"]) == [PEAK, NON_PEAK]
        assert out["JIO"][PEAK].average("download_mbps") == pytest.approx(80.0)
        assert out["JIO"][NON_PEAK].average("download_mbps") == pytest.approx(40.0)
        assert out["AIRTEL"][NON_PEAK].average("download_mbps") == pytest.approx(50.0)
        assert out["VI"][PEAK].count == 0
        assert out["VI"][PEAK].average("download_mbps") == 0.0

    def test_latency_by_city_network(self, frame):
        out = latency_by_city_network(frame)
        assert list(out) == ["Bengaluru", "Mumbai", "Pune"]
        assert out["Mumbai"]["4G"].average("latency_ms") == pytest.approx(52.5)
        assert out["Mumbai"]["5G"].average("latency_ms") == pytest.approx(50.0)
        assert out["Pune"]["5G"].average("latency_ms") == 0.0

    def test_coverage_by_year_network(self, frame):
        out = coverage_by_year_network(frame)
        counts = {y: {n: b.count for n, b in cells.items()} for y, cells in out.items()}
        assert counts == {
            2022: {"4G": 1, "5G": 0},
            2023: {"4G": 3, "5G": 1},
            2024: {"4G": 2, "5G": 1},
        }

    def test_download_by_year_operator(self, frame):
        out = download_by_year_operator(frame)
        assert out[2024]["JIO"].average("download_mbps") == pytest.approx(100.0)
        assert out[2024]["VI"].average("download_mbps") == pytest.approx(25.0)
        assert out[2022]["AIRTEL"].count == 0

    def test_latency_by_year_peak(self, frame):
        out = latency_by_year_peak(frame)
        assert out[2023][PEAK].average("latency_ms") == pytest.approx(20.0)
        assert out[2023][NON_PEAK].average("latency_ms") == pytest.approx(70.0)

    def test_score_by_operator(self, frame):
        out = score_by_operator(frame)
        assert list(out) == ["AIRTEL", "JIO", "VI"]


class TestUserGroupings:

    def test_city_operator_keeps_first_cities(self, frame):
        out = download_by_city_operator(frame, top_n=2)
        assert list(out) == ["Bengaluru", "Mumbai"]
        assert out["Bengaluru"]["VI"].count == 0

    def test_latency_by_peak_operator(self, frame):
        out = latency_by_peak_operator(frame)
        assert list(out) == [NON_PEAK, PEAK]
        assert out[PEAK]["JIO"].average("latency_ms") == pytest.approx(27.5)

    def test_hourly_download_has_every_hour(self, frame):
        out = hourly_download_by_operator(frame)
        assert list(out) == list(range(24))
        assert out[9]["JIO"].average("download_mbps") == pytest.approx(60.0)
        assert out[10]["AIRTEL"].average("download_mbps") == pytest.approx(60.0)
        assert out[10]["VI"].average("download_mbps") == pytest.approx(22.5)
        assert out[3]["JIO"].count == 0

    def test_chart_data_per_role(self, frame):
        assert set(chart_data(frame, "admin")) == {
            "download_by_operator_peak", "latency_by_city_network", "coverage_by_year_network",
            "download_by_year_operator", "latency_by_year_peak", "score_by_operator",
        }
        assert set(chart_data(frame, "user")) == {
            "download_by_city_operator", "latency_by_peak_operator", "hourly_download_by_operator",
        }
        with pytest.raises(ValueError):
            chart_data(frame, "guest")

    def test_chart_data_on_empty_frame(self, frame):
        out = chart_data(frame.iloc[0:0], "admin")
        assert out["score_by_operator"] == {}
        assert out["download_by_operator_peak"] == {}


class TestAreaSummaries:

    def test_one_row_per_area_operator(self, frame):
        rows = area_summaries(frame)
        assert len(rows) == 7
        assert sum(r.count for r in rows) == len(frame)

    def test_ordered_by_score_desc(self, frame):
        rows = area_summaries(frame)
        assert (rows[0].area, rows[0].operator) == ("Whitefield", "JIO")
        assert (rows[-1].area, rows[-1].operator) == ("Bandra", "VI")
        scores = [r.avg_score for r in rows]
        assert scores == sorted(scores, reverse=True)

    def test_averages(self, frame):
        rows = {(r.area, r.operator): r for r in area_summaries(frame)}
        andheri = rows[("Andheri", "JIO")]
        assert andheri.avg_download == pytest.approx(50.0)
        assert andheri.avg_upload == pytest.approx(15.0)
        assert andheri.avg_score == pytest.approx(0.8)


class TestSeries:

    def test_to_series_averages(self, frame):
        s = to_series(download_by_operator_peak(frame), "download_mbps")
        assert s["labels"] == ["AIRTEL", "JIO", "VI"]
        peak = next(d for d in s["datasets"] if d["label"] == PEAK)
        assert peak["data"] == [80.0, 80.0, 0]

    def test_to_series_counts(self, frame):
        s = to_series(coverage_by_year_network(frame))
        assert s["labels"] == [2022, 2023, 2024]
        g5 = next(d for d in s["datasets"] if d["label"] == "5G")
        assert g5["data"] == [0, 1, 1]

    def test_to_series_rounds_to_two_decimals(self):
        nested = {"a": {"x": AggregationBucket(("a", "x"), 3, {"m": 1.0})}}
        assert to_series(nested, "m")["datasets"][0]["data"] == [0.33]

    def test_series_frame(self, frame):
        df = series_frame(latency_by_city_network(frame), "latency_ms", "city", "network_type")
        assert list(df.columns) == ["city", "network_type", "value", "count"]
        assert len(df) == 6
        assert df["count"].sum() == len(frame)
