import pytest

from bi_browser.core.dataset import Dataset, FieldMetadata
from bi_browser.core.exceptions import DatasetSchemaError
from bi_browser.core.values import FieldType


def _make_dataset() -> Dataset:
    return Dataset.from_records(
        [
            {"Region": "North", "Product": "A", "Sales": 100},
            {"Region": "South", "Product": "B", "Sales": 200},
            {"Region": "North", "Product": "B", "Sales": 150},
            {"Product": "C", "Sales": 10},
        ],
        [FieldMetadata("Region"), FieldMetadata("Product"), FieldMetadata("Sales", FieldType.NUMBER)],
        name="sales",
    )


def test_fields_and_types():
    ds = _make_dataset()
    assert ds.field_names == ["Region", "Product", "Sales"]
    assert ds.field_type("Sales") is FieldType.NUMBER
    assert ds.field_type("Unknown") is None
    assert len(ds) == 4


def test_undeclared_columns_get_inferred_types():
    ds = Dataset.from_records([{"Month": "2024-01-01", "Units": 3}])
    assert ds.field_type("Month") is FieldType.DATE
    assert ds.field_type("Units") is FieldType.NUMBER


def test_ints_stay_ints_with_missing_cells():
    ds = Dataset.from_records([{"Sales": 1}, {"Other": "x"}])
    assert ds.column("Sales").tolist() == [1, None]
    assert isinstance(ds.column("Sales").iloc[0], int)


def test_distinct_values_are_sorted_and_skip_missing():
    ds = _make_dataset()
    assert ds.distinct_values("Region") == ["North", "South"]
    assert ds.distinct_values("Unknown") == []


def test_mask_or_within_field_and_across_fields():
    ds = _make_dataset()

    assert ds.mask_for({}).tolist() == [True, True, True, True]
    assert ds.mask_for({"Region": {"North", "South"}}).tolist() == [True, True, True, False]
    assert ds.mask_for({"Region": {"North"}, "Product": {"B"}}).tolist() == [False, False, True, False]


def test_mask_is_cached_and_read_only():
    ds = _make_dataset()
    m1 = ds.mask_for({"Region": {"North"}})
    m2 = ds.mask_for({"Region": frozenset({"North"})})
    assert m1 is m2
    assert not m1.flags.writeable

    ds.clear_caches()
    assert ds.mask_for({"Region": {"North"}}) is not m1


def test_constraint_on_unknown_field_matches_nothing():
    ds = _make_dataset()
    assert not ds.mask_for({"Nope": {"x"}}).any()


def test_payload_roundtrip_omits_missing_cells():
    ds = _make_dataset()
    payload = ds.to_payload()

    assert payload["fields"][2] == {"name": "Sales", "type": "number"}
    assert payload["data"][3] == {"Product": "C", "Sales": 10}

    rebuilt = Dataset.from_payload(payload)
    assert rebuilt.to_records() == ds.to_records()


def test_payload_errors():
    with pytest.raises(DatasetSchemaError):
        Dataset.from_payload({"fields": []})
    with pytest.raises(DatasetSchemaError):
        Dataset.from_payload({"data": [1, 2]})
    with pytest.raises(DatasetSchemaError):
        Dataset.from_payload({"fields": [{"name": "x", "type": "bogus"}], "data": []})
