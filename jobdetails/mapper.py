"""Translation between external job records and storage rows."""

import json
from typing import Any, Dict, Mapping

from .errors import DataIntegrityError
from .schema import OPTIONAL_FIELDS

FIELD_TO_COLUMN = {
    "id": "id",
    "title": "title",
    "description": "description",
    "longDescription": "long_description",
    "budget": "budget",
    "timePosted": "time_posted",
    "category": "category",
    "expertise": "expertise",
    "proposals": "proposals",
    "clientRating": "client_rating",
    "clientLocation": "client_location",
    "jobType": "job_type",
    "projectLength": "project_length",
    "weeklyHours": "weekly_hours",
    "skills": "skills",
    "activityOn": "activity_on",
    "clientHistory": "client_history",
    "attachments": "attachments",
    "questions": "questions",
}
COLUMN_TO_FIELD = {column: field for field, column in FIELD_TO_COLUMN.items()}

SEQUENCE_FIELDS = {"skills", "attachments", "questions"}


def encode_client_history(history: Dict[str, Any]) -> str:
    return json.dumps(history, ensure_ascii=False, sort_keys=True)


def decode_client_history(blob: Any) -> Dict[str, Any]:
    # Some drivers hand JSON columns back already decoded
    if isinstance(blob, dict):
        return blob
    try:
        value = json.loads(blob)
    except (TypeError, ValueError) as e:
        raise DataIntegrityError(f"Stored client_history is not valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise DataIntegrityError("Stored client_history is not a JSON object")
    return value


def to_row(record: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Map a normalized job record onto storage column names.

    Every column is present in the result; absent optional fields map to None
    so an UPDATE clears them.
    """
    row: Dict[str, Any] = {}
    for field, column in FIELD_TO_COLUMN.items():
        value = record.get(field)
        if field == "clientHistory" and value is not None:
            value = encode_client_history(value)
        elif field in SEQUENCE_FIELDS and value is not None:
            value = list(value)
        row[column] = value
    return row


def from_row(row: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Rebuild an external job record from a storage row.

    Columns that are not part of the record (e.g. window counts) are ignored,
    and optional fields stored as NULL are left out.

    Raises:
        DataIntegrityError: if client_history cannot be decoded
    """
    record: Dict[str, Any] = {}
    for column, field in COLUMN_TO_FIELD.items():
        if column not in row:
            continue
        value = row[column]
        if value is None and field in OPTIONAL_FIELDS:
            continue
        if field == "clientHistory":
            value = decode_client_history(value)
        elif field in SEQUENCE_FIELDS and value is not None:
            value = list(value)
        record[field] = value
    return record
