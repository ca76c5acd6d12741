"""
Record store tests: loading, filter semantics, cascading selection and option lists.
"""

import pytest

from netquality_dash.errors import DataLoadError, InvalidFilterDimensionError, StoreNotLoadedError
from netquality_dash.settings import ALL
from netquality_dash.store import FilterState, RecordStore


class TestLoading:

    def test_unloaded_store_fails_fast(self):
        s = RecordStore()
        assert not s.is_loaded
        with pytest.raises(StoreNotLoadedError):
            s.apply_filter()
        with pytest.raises(StoreNotLoadedError):
            s.unique_values("city")
        with pytest.raises(StoreNotLoadedError):
            _ = s.records

    def test_load_replaces_collection(self, store, make_record):
        assert len(store) == 8
        store.load([make_record()])
        assert len(store) == 1

    def test_failed_load_keeps_previous_data(self, store):
        with pytest.raises(DataLoadError):
            store.load(None)
        assert len(store) == 8

    def test_loaded_empty_is_not_unloaded(self):
        s = RecordStore()
        s.load([])
        assert s.is_loaded
        assert s.apply_filter().empty

    def test_records_are_copies(self, store):
        df = store.records
        df.loc[:, "download_mbps"] = -1
        assert (store.records["download_mbps"] >= 0).all()


class TestApplyFilter:
    """Every returned record satisfies every non-"All" constraint."""

    def test_no_filter_returns_everything(self, store):
        assert len(store.apply_filter()) == 8
        assert len(store.apply_filter(FilterState())) == 8
        assert len(store.apply_filter({"state": ALL, "city": ALL})) == 8

    def test_single_dimension(self, store):
        out = store.apply_filter({"state": "Maharashtra"})
        assert len(out) == 6
        assert (out["state"] == "Maharashtra").all()

    def test_constraints_are_anded(self, store):
        out = store.apply_filter({"state": "Maharashtra", "operator": "VI"})
        assert len(out) == 2
        assert set(out["area"]) == {"Bandra", "Kothrud"}

    def test_operator_is_case_insensitive(self, store):
        assert len(store.apply_filter({"operator": "jio"})) == 3
        assert len(store.apply_filter({"operator": "JIO"})) == 3

    def test_years_and_month(self, store):
        assert len(store.apply_filter({"years": [2024]})) == 3
        assert len(store.apply_filter({"years": [2022, 2024]})) == 4
        assert len(store.apply_filter({"month": 2})) == 2
        assert len(store.apply_filter({"years": [], "month": ALL})) == 8

    def test_result_is_subset(self, store, frame):
        out = store.apply_filter({"network_type": "5G"})
        assert set(out.index) <= set(frame.index)
        assert (out["network_type"] == "5G").all()

    def test_no_match_is_empty_not_error(self, store):
        assert store.apply_filter({"city": "Nowhere"}).empty

    def test_single_value_slices_partition_the_set(self, store, frame):
        for dim in ("state", "city", "area", "operator", "network_type"):
            seen = set()
            for value in store.unique_values(dim):
                idx = set(store.apply_filter({dim: value}).index)
                assert not (idx & seen)
                seen |= idx
            assert seen == set(frame.index)

    def test_unknown_dimension_rejected(self, store):
        with pytest.raises(InvalidFilterDimensionError) as exc:
            store.apply_filter({"network": "4G"})
        assert isinstance(exc.value, KeyError)
        assert "network" in str(exc.value)


class TestFilterState:

    def test_from_mapping_coerces(self):
        f = FilterState.from_mapping({"years": [2023, "2024"], "month": "All", "city": "Pune"})
        assert f.years == frozenset({2023, 2024})
        assert f.month is None
        assert f.city == "Pune"

    def test_update_is_non_destructive(self):
        f = FilterState()
        g = f.update("state", "Delhi")
        assert f.state == ALL
        assert g.state == "Delhi"

    def test_update_unknown_dimension(self):
        with pytest.raises(InvalidFilterDimensionError):
            FilterState().update("region", "x")

    def test_constraints_lists_only_active(self):
        f = FilterState(state="Delhi", years=frozenset({2024, 2022}), month=3)
        assert f.constraints() == {"state": "Delhi", "years": [2022, 2024], "month": 3}


class TestCascadingSelect:
    """Changing a parent resets children it no longer contains."""

    def test_new_state_resets_city_and_area(self, store):
        f = FilterState(state="Maharashtra", city="Mumbai", area="Andheri")
        g = store.select(f, "state", "Karnataka")
        assert (g.state, g.city, g.area) == ("Karnataka", ALL, ALL)

    def test_compatible_child_is_kept(self, store):
        f = FilterState(city="Pune", area="Kothrud")
        g = store.select(f, "state", "Maharashtra")
        assert (g.city, g.area) == ("Pune", "Kothrud")

    def test_area_checked_against_nearest_parent(self, store):
        f = FilterState(area="Kothrud")
        g = store.select(f, "state", "Karnataka")
        assert g.area == ALL

    def test_city_change_resets_area(self, store):
        f = FilterState(city="Mumbai", area="Andheri")
        g = store.select(f, "city", "Bengaluru")
        assert g.area == ALL

    def test_non_hierarchical_dimension_does_not_cascade(self, store):
        f = FilterState(city="Mumbai", area="Andheri")
        g = store.select(f, "operator", "VI")
        assert (g.city, g.area, g.operator) == ("Mumbai", "Andheri", "VI")


class TestOptionLists:

    def test_unique_values_ignore_current_filter(self, store):
        store.apply_filter({"state": "Karnataka"})
        assert store.unique_values("city") == ["Bengaluru", "Mumbai", "Pune"]

    def test_dependent_values(self, store):
        assert store.dependent_values("city", "state", "Maharashtra") == ["Mumbai", "Pune"]
        assert store.dependent_values("area", "city", "Mumbai") == ["Andheri", "Bandra"]

    def test_dependent_values_all_is_unrestricted(self, store):
        assert store.dependent_values("area", "city", ALL) == store.unique_values("area")

    def test_unknown_field(self, store):
        with pytest.raises(InvalidFilterDimensionError):
            store.unique_values("region")

    def test_filter_options(self, store):
        opts = store.filter_options()
        assert opts["operators"] == ["AIRTEL", "JIO", "VI"]
        assert opts["network_types"] == ["4G", "5G"]
        assert opts["years"] == [2022, 2023, 2024]
        assert opts["states"] == ["Karnataka", "Maharashtra"]

    def test_state_to_cities(self, store):
        assert store.state_to_cities() == {
            "Karnataka": ["Bengaluru"],
            "Maharashtra": ["Mumbai", "Pune"],
        }


class TestSelectorOptions:
    """Options offered for a dimension never contradict the cascade reset."""

    def test_area_under_state_without_city(self, store):
        f = FilterState(state="Maharashtra")
        assert store.options_for(f, "area") == ["Andheri", "Bandra", "Kothrud"]

    def test_nearest_constraint(self, store):
        assert store.nearest_constraint(FilterState(state="Karnataka"), "area") == ("state", "Karnataka")
        assert store.nearest_constraint(FilterState(city="Pune"), "area") == ("city", "Pune")
        assert store.nearest_constraint(FilterState(), "area") == (None, ALL)

    def test_every_offered_area_survives_select(self, store):
        for state in store.unique_values("state"):
            f = FilterState(state=state)
            for area in store.options_for(f, "area"):
                assert store.select(f, "area", area).area == area
                assert not store.apply_filter(f.update("area", area)).empty

    def test_blanks_are_not_offered(self, make_record):
        s = RecordStore()
        s.load([make_record(network_type=""), make_record(network_type="4G", year=0)])
        assert s.options_for(FilterState(), "network_type") == ["4G"]
        assert s.options_for(FilterState(), "years") == [2023]

    def test_unknown_dimension(self, store):
        with pytest.raises(InvalidFilterDimensionError):
            store.options_for(FilterState(), "region")
