"""Boundary sanitization for catalog records.

Catalog records share their document shape with the retrieval service
(``_id``, ``categoryId``, ``createdAt``...). Before a record leaves the
gateway, internal fields are removed and relational/date fields are
normalized:

- ``embedding`` and ``__v`` are dropped
- ``_id`` becomes a string
- an expanded ``categoryId`` becomes ``category: {_id, name}``
- an unresolved ``categoryId`` becomes a string
- timestamps (datetimes, ISO-8601 or RFC 1123 text, epoch milliseconds)
  become UTC ISO-8601 text with millisecond precision

Sanitization never fails: input it cannot interpret is returned as-is.
"""

from collections.abc import Mapping
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

ID_FIELD = "_id"
CATEGORY_REF_FIELD = "categoryId"
CATEGORY_FIELD = "category"
INTERNAL_FIELDS = ("embedding", "__v")
TIMESTAMP_FIELDS = ("createdAt", "updatedAt")


def format_timestamp(value: datetime) -> str:
    """Format a datetime as UTC ISO-8601 with milliseconds and a ``Z`` suffix.

    Naive datetimes are assumed to already be in UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def utc_timestamp() -> str:
    """Current time in the boundary timestamp format."""
    return format_timestamp(datetime.now(timezone.utc))


def _parse_text_timestamp(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass
    # RFC 1123, as emitted by Flask's jsonify
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None


def _normalize_timestamp(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        # Epoch milliseconds
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return value
        return format_timestamp(parsed)
    if isinstance(value, str) and value:
        parsed = _parse_text_timestamp(value)
        return format_timestamp(parsed) if parsed is not None else value
    return value


def sanitize_record(record: Any) -> Any:
    """Return the boundary representation of a single catalog record.

    Args:
        record: Record mapping, with or without an expanded category.

    Returns:
        A new dict; the input is not modified. Non-mapping input is
        returned unchanged.
    """
    if not isinstance(record, Mapping):
        return record

    cleaned = dict(record)

    for field in INTERNAL_FIELDS:
        cleaned.pop(field, None)

    if cleaned.get(ID_FIELD) is not None:
        cleaned[ID_FIELD] = str(cleaned[ID_FIELD])

    category = cleaned.get(CATEGORY_REF_FIELD)
    if category is not None:
        if isinstance(category, Mapping):
            # Expanded reference without an identifier is left untouched
            if category.get(ID_FIELD) is not None:
                cleaned[CATEGORY_FIELD] = {
                    ID_FIELD: str(category[ID_FIELD]),
                    "name": category.get("name"),
                }
                del cleaned[CATEGORY_REF_FIELD]
        else:
            cleaned[CATEGORY_REF_FIELD] = str(category)

    for field in TIMESTAMP_FIELDS:
        if cleaned.get(field) is not None:
            cleaned[field] = _normalize_timestamp(cleaned[field])

    return cleaned


def sanitize_records(records: Any) -> Any:
    """Sanitize a sequence of records, preserving order.

    Non-list input is returned unchanged.
    """
    if not isinstance(records, (list, tuple)):
        return records
    return [sanitize_record(r) for r in records]
