import pytest

from bi_browser.core.aggregation import aggregate
from bi_browser.core.associative import (
    AssociativeEvaluator,
    SelectionState,
    classify_field,
    possible_rows,
)
from bi_browser.core.dataset import Dataset
from bi_browser.core.selection import EMPTY_SNAPSHOT, SelectionSnapshot


def _make_dataset() -> Dataset:
    return Dataset.from_records(
        [
            {"Region": "North", "Product": "A", "Sales": 100},
            {"Region": "South", "Product": "B", "Sales": 200},
            {"Region": "North", "Product": "B", "Sales": 150},
        ],
        name="scenario",
    )


def _states(statuses):
    return {s.value: s.state for s in statuses}


def test_empty_snapshot_everything_possible():
    ds = _make_dataset()
    for field in ds.field_names:
        assert all(s.state is SelectionState.POSSIBLE for s in classify_field(field, ds, EMPTY_SNAPSHOT))


def test_selected_values_are_selected():
    ds = _make_dataset()
    snap = SelectionSnapshot({"Region": ["North"], "Product": ["A"]})
    assert _states(classify_field("Region", ds, snap))["North"] is SelectionState.SELECTED
    assert _states(classify_field("Product", ds, snap))["A"] is SelectionState.SELECTED


def test_own_selection_never_excludes_siblings():
    ds = _make_dataset()
    snap = SelectionSnapshot({"Region": ["North"]})
    states = _states(classify_field("Region", ds, snap))
    assert states == {"North": SelectionState.SELECTED, "South": SelectionState.POSSIBLE}


def test_scenario_north_then_product_a():
    ds = _make_dataset()

    snap = EMPTY_SNAPSHOT.toggle("Region", "North")
    assert _states(classify_field("Product", ds, snap)) == {
        "A": SelectionState.POSSIBLE,
        "B": SelectionState.POSSIBLE,
    }

    snap = snap.toggle("Product", "A")
    assert _states(classify_field("Region", ds, snap)) == {
        "North": SelectionState.SELECTED,
        "South": SelectionState.EXCLUDED,
    }
    assert _states(classify_field("Product", ds, snap)) == {
        "A": SelectionState.SELECTED,
        "B": SelectionState.POSSIBLE,
    }

    rows = aggregate(possible_rows(ds, snap), "Region", "Sales", "sum")
    assert [(r.key, r.value) for r in rows] == [("North", 100.0)]


def test_selection_elsewhere_never_grows_possible_set():
    ds = _make_dataset()

    def possible(snap):
        return {
            s.value
            for s in classify_field("Region", ds, snap)
            if s.state is not SelectionState.EXCLUDED
        }

    before = possible(EMPTY_SNAPSHOT)
    after = possible(EMPTY_SNAPSHOT.toggle("Product", "A"))
    assert after <= before
    assert after == {"North"}


def test_missing_field_fails_constraint():
    ds = Dataset.from_records(
        [
            {"Region": "North", "Product": "A"},
            {"Product": "B"},
        ]
    )
    snap = SelectionSnapshot({"Region": ["North"]})
    assert _states(classify_field("Product", ds, snap)) == {
        "A": SelectionState.POSSIBLE,
        "B": SelectionState.EXCLUDED,
    }
    assert len(possible_rows(ds, snap)) == 1


def test_values_come_back_sorted():
    ds = Dataset.from_records([{"Sales": 20}, {"Sales": 3}, {"Sales": 100}])
    assert [s.value for s in classify_field("Sales", ds, EMPTY_SNAPSHOT)] == [3, 20, 100]


def test_alternatives_are_opt_in():
    ds = _make_dataset()
    snap = SelectionSnapshot({"Region": ["North"]})

    default = _states(classify_field("Region", ds, snap))
    assert default["South"] is SelectionState.POSSIBLE

    with_alt = _states(classify_field("Region", ds, snap, alternatives=True))
    assert with_alt["North"] is SelectionState.SELECTED
    assert with_alt["South"] is SelectionState.ALTERNATIVE

    # a field without its own selection still reports POSSIBLE
    product = _states(classify_field("Product", ds, snap, alternatives=True))
    assert set(product.values()) == {SelectionState.POSSIBLE}


@pytest.mark.parametrize("alternatives", [False, True])
def test_evaluator_matches_classify_field(alternatives):
    ds = _make_dataset()
    snap = SelectionSnapshot({"Region": ["North"], "Product": ["A"]})
    evaluator = AssociativeEvaluator(ds, snap, alternatives=alternatives)

    result = evaluator.classify_all()
    assert list(result) == ["Region", "Product", "Sales"]
    for field, statuses in result.items():
        assert statuses == classify_field(field, ds, snap, alternatives=alternatives)


def test_evaluator_shares_masks_between_unselected_fields():
    ds = _make_dataset()
    snap = SelectionSnapshot({"Region": ["North"]})
    evaluator = AssociativeEvaluator(ds, snap)

    evaluator.classify("Product")
    evaluator.classify("Sales")
    assert len(evaluator._masks) == 1

    evaluator.classify("Region")
    assert len(evaluator._masks) == 2

    assert evaluator.possible_count() == 2
    assert list(evaluator.possible_rows()["Product"]) == ["A", "B"]


def test_empty_dataset_has_no_values_or_groups():
    ds = Dataset.from_records([])
    assert classify_field("Region", ds, EMPTY_SNAPSHOT) == []
    assert classify_field("Region", ds, SelectionSnapshot({"Region": ["North"]})) == []
    assert aggregate(ds, "Region", "Sales") == []


def test_mixed_date_forms_classify_in_canonical_order():
    ds = Dataset.from_records(
        [
            {"When": "2024-01-02T10:00:00+02:00", "Region": "North"},
            {"When": "2024-01-01", "Region": "South"},
            {"When": "2024-01-02", "Region": "South"},
        ]
    )
    snap = SelectionSnapshot({"Region": ["South"]})
    assert [(s.value, s.state) for s in classify_field("When", ds, snap)] == [
        ("2024-01-01", SelectionState.POSSIBLE),
        ("2024-01-02", SelectionState.POSSIBLE),
        ("2024-01-02T10:00:00+02:00", SelectionState.EXCLUDED),
    ]


def test_tightening_one_field_never_grows_other_fields():
    ds = Dataset.from_records(
        [
            {"Region": "North", "Product": "A", "Channel": "Web"},
            {"Region": "South", "Product": "B", "Channel": "Store"},
            {"Region": "North", "Product": "B", "Channel": "Phone"},
            {"Region": "East", "Product": "C", "Channel": "Web"},
            {"Region": "South", "Product": "C", "Channel": "Phone"},
        ]
    )

    def possible(snap):
        return {
            s.value
            for s in classify_field("Channel", ds, snap)
            if s.state is not SelectionState.EXCLUDED
        }

    loose = SelectionSnapshot({"Region": ["North", "South"], "Product": ["A", "B", "C"]})
    tight = SelectionSnapshot({"Region": ["North", "South"], "Product": ["B", "C"]})
    tighter = SelectionSnapshot({"Region": ["North", "South"], "Product": ["B"]})

    assert possible(loose) == {"Web", "Store", "Phone"}
    assert possible(tight) == {"Store", "Phone"}
    assert possible(tighter) == {"Store", "Phone"}
    assert possible(tighter) <= possible(tight) <= possible(loose)
