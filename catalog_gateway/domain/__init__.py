"""Domain module.

Pure, side-effect-free rules for catalog documents.
"""

from catalog_gateway.domain.sanitizer import (
    format_timestamp,
    sanitize_record,
    sanitize_records,
    utc_timestamp,
)

__all__ = [
    "format_timestamp",
    "sanitize_record",
    "sanitize_records",
    "utc_timestamp",
]
