# src/plump_rest/infra/normalize.py
"""
Date coercion for records coming back from a backend.

JSON has no date type, so the schema tells us which attribute names and which
relationship edge-meta fields hold dates. Everything else passes through.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Union

from dateutil import parser as dateutil_parser
from pydantic import TypeAdapter, ValidationError

from plump_rest.models import Schema, InvalidDate
from plump_rest.ports.storage import SchemaSource

_DATETIME = TypeAdapter(datetime)

DateValue = Union[datetime, InvalidDate]


def _utc(value: datetime) -> datetime:
    # date-only and offset-less values are read as UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


# JS Date.toString(): "Fri Mar 01 2024 12:00:00 GMT+0000 (Coordinated Universal Time)"
_JS_ZONE_NAME = re.compile(r"\s*\([^)]*\)\s*$")
_JS_GMT_OFFSET = re.compile(r"\bGMT(?=[+-]\d)")


def _parse_text(raw: str) -> datetime:
    text = _JS_GMT_OFFSET.sub("", _JS_ZONE_NAME.sub("", raw.strip()))
    return dateutil_parser.parse(text)


def parse_date(raw: Any) -> DateValue:
    """
    ISO-8601, epoch seconds/milliseconds, RFC 1123 HTTP dates, SQL-style
    timestamps and JS Date.toString() output. Anything else is an InvalidDate.
    """
    if isinstance(raw, datetime):
        return raw
    if raw is None or isinstance(raw, bool):
        return InvalidDate(raw=raw)
    try:
        return _utc(_DATETIME.validate_python(raw))
    except ValidationError:
        pass
    if isinstance(raw, str):
        try:
            return _utc(_parse_text(raw))
        except (ValueError, OverflowError):
            pass
    return InvalidDate(raw=raw)


def _fix_edges(edges: List[Dict[str, Any]], fields: List[str]) -> List[Dict[str, Any]]:
    fixed = []
    for edge in edges:
        meta = edge.get("meta") or {}
        dates = {f: parse_date(meta[f]) for f in fields if f in meta}
        if dates:
            edge = {**edge, "meta": {**meta, **dates}}
        fixed.append(edge)
    return fixed


def normalize_dates(schema: Schema, record: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(record, dict):
        return record
    if not record.get("attributes") and not record.get("relationships"):
        return record

    attributes = record.get("attributes") or {}
    relationships = record.get("relationships") or {}

    attr_override = {
        name: parse_date(attributes[name])
        for name in schema.date_attributes()
        if name in attributes
    }

    rel_override = {}
    for rel_name in schema.relationships:
        edges = relationships.get(rel_name)
        if not edges:
            continue
        fields = schema.date_extras(rel_name)
        if fields:
            rel_override[rel_name] = _fix_edges(edges, fields)

    out = dict(record)
    if attr_override:
        out["attributes"] = {**attributes, **attr_override}
    if rel_override:
        out["relationships"] = {**relationships, **rel_override}
    return out


class DateNormalizer:
    """Binds normalize_dates to a schema lookup; the lookup only happens when a record needs it."""

    def __init__(self, schemas: SchemaSource) -> None:
        self._schemas = schemas

    def normalize(self, record: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(record, dict):
            return record
        if not record.get("attributes") and not record.get("relationships"):
            return record
        return normalize_dates(self._schemas.get_schema(record["type"]), record)
