from scatter_explorer.fields import (
    FIELD_CATEGORICAL,
    FIELD_NUMERIC,
    infer_field_types,
    split_fields,
    to_number,
    unique_values,
)


def test_numeric_when_every_value_parses():
    rows = [{"a": "1", "b": "x", "c": 1.5}, {"a": "2.5", "b": "3", "c": -4}]
    types = infer_field_types(rows)
    assert types == {"a": FIELD_NUMERIC, "b": FIELD_CATEGORICAL, "c": FIELD_NUMERIC}


def test_empty_values_are_ignored():
    rows = [{"v": 1}, {"v": ""}, {"v": None}, {"v": float("nan")}, {}]
    assert infer_field_types(rows) == {"v": FIELD_NUMERIC}


def test_field_without_values_is_categorical():
    rows = [{"v": ""}, {"v": None}]
    assert infer_field_types(rows) == {"v": FIELD_CATEGORICAL}


def test_non_finite_and_bool_values_are_categorical():
    assert infer_field_types([{"v": "1"}, {"v": "inf"}]) == {"v": FIELD_CATEGORICAL}
    assert infer_field_types([{"v": True}, {"v": 1}]) == {"v": FIELD_CATEGORICAL}


def test_field_order_is_first_seen():
    rows = [{"b": 1}, {"a": 2, "b": 3}, {"c": "z"}]
    assert list(infer_field_types(rows)) == ["b", "a", "c"]


def test_no_records_no_fields():
    assert infer_field_types([]) == {}


def test_to_number():
    assert to_number("  42 ") == 42.0
    assert to_number(3) == 3.0
    assert to_number("1e3") == 1000.0
    assert to_number("") is None
    assert to_number("abc") is None
    assert to_number(False) is None
    assert to_number(float("inf")) is None


def test_unique_values_numeric_sorted():
    rows = [{"l": 3}, {"l": 1}, {"l": 3}, {"l": 2}, {"l": None}, {}]
    assert unique_values(rows, "l") == [1, 2, 3]


def test_unique_values_numeric_strings_sorted_by_value():
    rows = [{"l": "10"}, {"l": "9"}, {"l": "10"}]
    assert unique_values(rows, "l") == ["9", "10"]


def test_unique_values_categorical_first_seen():
    rows = [{"l": "b"}, {"l": "a"}, {"l": "b"}, {"l": "c"}]
    assert unique_values(rows, "l") == ["b", "a", "c"]


def test_unique_values_missing_field():
    assert unique_values([{"a": 1}], "missing") == []


def test_split_fields_preserves_order():
    types = {"x": FIELD_NUMERIC, "name": FIELD_CATEGORICAL, "y": FIELD_NUMERIC}
    numeric, categorical, all_fields = split_fields(types)
    assert numeric == ["x", "y"]
    assert categorical == ["name"]
    assert all_fields == ["x", "name", "y"]
