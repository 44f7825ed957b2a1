from typing import Any, Dict, List

from .errors import ValidationError

REQUIRED_STR_FIELDS = [
    "title",
    "description",
    "longDescription",
    "budget",
    "timePosted",
    "category",
    "expertise",
    "clientLocation",
    "jobType",
    "projectLength",
    "activityOn",
]
OPTIONAL_STR_FIELDS = ["weeklyHours"]
REQUIRED_LIST_FIELDS = ["skills"]
OPTIONAL_LIST_FIELDS = ["attachments", "questions"]

CLIENT_HISTORY_STR_FIELDS = ["totalSpent", "memberSince"]
VERIFICATION_FIELDS = ["payment", "phone", "email"]

JOB_FIELDS = (
    ["id"]
    + REQUIRED_STR_FIELDS
    + OPTIONAL_STR_FIELDS
    + ["proposals", "clientRating"]
    + REQUIRED_LIST_FIELDS
    + OPTIONAL_LIST_FIELDS
    + ["clientHistory"]
)
OPTIONAL_FIELDS = OPTIONAL_STR_FIELDS + OPTIONAL_LIST_FIELDS


def _is_int(v: Any) -> bool:
    # bool is an int subclass but never a count
    return isinstance(v, int) and not isinstance(v, bool)


def _is_number(v: Any) -> bool:
    return _is_int(v) or isinstance(v, float)


def _is_sequence(v: Any) -> bool:
    return isinstance(v, (list, tuple))


def _check_str_list(name: str, value: Any, errors: List[str]) -> None:
    if not _is_sequence(value):
        errors.append(f"Field '{name}' must be a list of strings")
        return
    for i, item in enumerate(value):
        if not isinstance(item, str):
            errors.append(f"Field '{name}[{i}]' must be a string")


def _validate_verification(data: Any, prefix: str, errors: List[str]) -> None:
    if not isinstance(data, dict):
        errors.append(f"Field '{prefix}' must be an object")
        return
    for f in VERIFICATION_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {prefix}.{f}")
        elif not isinstance(data[f], bool):
            errors.append(f"Field '{prefix}.{f}' must be a boolean")


def _validate_client_history(data: Any, prefix: str, errors: List[str]) -> None:
    if not isinstance(data, dict):
        errors.append(f"Field '{prefix}' must be an object")
        return

    if "jobsPosted" not in data:
        errors.append(f"Missing required field: {prefix}.jobsPosted")
    elif not _is_int(data["jobsPosted"]):
        errors.append(f"Field '{prefix}.jobsPosted' must be an integer")

    if "hireRate" not in data:
        errors.append(f"Missing required field: {prefix}.hireRate")
    elif not _is_number(data["hireRate"]):
        errors.append(f"Field '{prefix}.hireRate' must be a number")

    for f in CLIENT_HISTORY_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {prefix}.{f}")
        elif not isinstance(data[f], str):
            errors.append(f"Field '{prefix}.{f}' must be a string")

    if "verificationStatus" not in data:
        errors.append(f"Missing required field: {prefix}.verificationStatus")
    else:
        _validate_verification(data["verificationStatus"], f"{prefix}.verificationStatus", errors)


def validate_job(data: Any) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.

    Every field is checked; violations are collected rather than stopping
    at the first one. Optional fields may be absent or None.
    """
    if not isinstance(data, dict):
        return ["Job record must be an object"]

    errors: List[str] = []

    if "id" not in data:
        errors.append("Missing required field: id")
    elif not isinstance(data["id"], str) or data["id"].strip() == "":
        errors.append("Field 'id' must be a non-empty string")

    for f in REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string")

    for f in OPTIONAL_STR_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    if "proposals" not in data:
        errors.append("Missing required field: proposals")
    elif not _is_int(data["proposals"]):
        errors.append("Field 'proposals' must be an integer")
    elif data["proposals"] < 0:
        errors.append("Field 'proposals' must be non-negative")

    if "clientRating" not in data:
        errors.append("Missing required field: clientRating")
    elif not _is_number(data["clientRating"]):
        errors.append("Field 'clientRating' must be a number")

    for f in REQUIRED_LIST_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        else:
            _check_str_list(f, data[f], errors)

    for f in OPTIONAL_LIST_FIELDS:
        if data.get(f) is not None:
            _check_str_list(f, data[f], errors)

    if "clientHistory" not in data:
        errors.append("Missing required field: clientHistory")
    else:
        _validate_client_history(data["clientHistory"], "clientHistory", errors)

    return errors


def _normalize_client_history(history: Dict[str, Any]) -> Dict[str, Any]:
    status = history["verificationStatus"]
    return {
        "jobsPosted": history["jobsPosted"],
        "hireRate": history["hireRate"],
        "totalSpent": history["totalSpent"],
        "memberSince": history["memberSince"],
        "verificationStatus": {f: status[f] for f in VERIFICATION_FIELDS},
    }


def normalize_job(data: Any) -> Dict[str, Any]:
    """
    Validate a candidate record and return its normalized form.

    The result holds only known fields, drops optional fields set to None,
    and copies sequences into fresh lists.

    Raises:
        ValidationError: listing every violation found
    """
    errors = validate_job(data)
    if errors:
        raise ValidationError(errors)

    record: Dict[str, Any] = {}
    for f in JOB_FIELDS:
        if f not in data or data[f] is None:
            continue
        value = data[f]
        if f == "clientHistory":
            value = _normalize_client_history(value)
        elif f in REQUIRED_LIST_FIELDS or f in OPTIONAL_LIST_FIELDS:
            value = list(value)
        record[f] = value
    return record
