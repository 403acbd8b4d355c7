# tests/test_normalize.py
import copy
from datetime import datetime, timezone

import pytest

from plump_rest.infra.normalize import DateNormalizer, normalize_dates, parse_date
from plump_rest.models import InvalidDate, Schema
from tests.conftest import WIDGET_SCHEMA, make_schemas

SCHEMA = Schema.model_validate(WIDGET_SCHEMA)


def _widget():
    return {
        "type": "widget",
        "id": 7,
        "attributes": {
            "name": "sprocket",
            "created_at": "2024-03-01T12:00:00Z",
            "updated_at": 1700000000000,
        },
        "relationships": {
            "tags": [
                {"id": 1, "meta": {"tagged_at": "2024-03-02T08:30:00+00:00", "weight": 3}},
                {"id": 2, "meta": {"weight": 1}},
            ],
            "owner": [{"id": 9, "meta": {"since": "2020-01-01T00:00:00Z"}}],
        },
    }


def test_declared_date_attributes_become_datetimes():
    out = normalize_dates(SCHEMA, _widget())
    assert out["attributes"]["created_at"] == datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    # epoch milliseconds
    assert out["attributes"]["updated_at"] == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
    assert out["attributes"]["name"] == "sprocket"


def test_edge_meta_dates_replaced_other_meta_untouched():
    out = normalize_dates(SCHEMA, _widget())
    first, second = out["relationships"]["tags"]
    assert first["id"] == 1
    assert first["meta"]["tagged_at"] == datetime(2024, 3, 2, 8, 30, tzinfo=timezone.utc)
    assert first["meta"]["weight"] == 3
    assert second == {"id": 2, "meta": {"weight": 1}}


def test_relationship_without_extras_passes_through():
    rec = _widget()
    out = normalize_dates(SCHEMA, rec)
    assert out["relationships"]["owner"] is rec["relationships"]["owner"]
    assert out["relationships"]["owner"][0]["meta"]["since"] == "2020-01-01T00:00:00Z"


def test_input_record_is_not_mutated():
    rec = _widget()
    before = copy.deepcopy(rec)
    normalize_dates(SCHEMA, rec)
    assert rec == before


def test_reference_only_record_returned_as_is():
    ref = {"type": "widget", "id": 7}
    assert normalize_dates(SCHEMA, ref) is ref


def test_reference_only_record_needs_no_schema_lookup():
    class Exploding:
        def get_schema(self, type_):
            raise AssertionError("schema should not be looked up")

    ref = {"type": "widget", "id": 7}
    assert DateNormalizer(Exploding()).normalize(ref) is ref


def test_empty_relationship_left_alone():
    rec = {"type": "widget", "id": 1, "attributes": {"name": "x"}, "relationships": {"tags": []}}
    out = normalize_dates(SCHEMA, rec)
    assert out == rec
    assert out["relationships"] is rec["relationships"]


def test_absent_date_attribute_is_not_added():
    rec = {"type": "widget", "id": 1, "attributes": {"name": "x"}}
    out = normalize_dates(SCHEMA, rec)
    assert "created_at" not in out["attributes"]


def test_unparseable_date_becomes_invalid_date():
    rec = {"type": "widget", "id": 1, "attributes": {"created_at": "not a date", "name": "x"}}
    out = normalize_dates(SCHEMA, rec)
    value = out["attributes"]["created_at"]
    assert isinstance(value, InvalidDate)
    assert value.raw == "not a date"
    assert not value
    assert out["attributes"]["name"] == "x"


def test_parse_date_accepts_datetime_and_epoch_seconds():
    now = datetime(2021, 5, 4, tzinfo=timezone.utc)
    assert parse_date(now) is now
    assert parse_date(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert isinstance(parse_date(None), InvalidDate)


MARCH_1_NOON = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("raw", [
    "2024-03-01T12:00:00Z",
    "Fri, 01 Mar 2024 12:00:00 GMT",
    "2024-03-01 12:00:00+00",
    "Fri Mar 01 2024 12:00:00 GMT+0000 (Coordinated Universal Time)",
    "Fri Mar 01 2024 14:00:00 GMT+0200 (Eastern European Standard Time)",
    1709294400,
    1709294400000,
])
def test_parse_date_accepts_backend_serializations(raw):
    assert parse_date(raw) == MARCH_1_NOON


def test_date_only_string_is_utc_midnight():
    value = parse_date("2024-03-01")
    assert value == datetime(2024, 3, 1, tzinfo=timezone.utc)
    assert value.tzinfo is not None


def test_unparseable_edge_meta_date_becomes_invalid_date():
    rec = {
        "type": "widget",
        "id": 1,
        "relationships": {"tags": [{"id": 4, "meta": {"tagged_at": "someday", "weight": 2}}]},
    }
    edge = normalize_dates(SCHEMA, rec)["relationships"]["tags"][0]
    assert edge["id"] == 4
    assert edge["meta"]["tagged_at"] == InvalidDate(raw="someday")
    assert edge["meta"]["weight"] == 2


def test_schema_is_not_changed_by_normalization():
    before = copy.deepcopy(SCHEMA.model_dump())
    normalize_dates(SCHEMA, _widget())
    assert SCHEMA.model_dump() == before


def test_non_record_input_passes_through():
    assert normalize_dates(SCHEMA, None) is None
    assert DateNormalizer(make_schemas()).normalize(None) is None
