"""
Validation for dynamic form definitions and the values submitted against them.

Field definitions are a closed set of kinds (FieldType). A single generic
validator looks up the per-kind check in _VALUE_CHECKS; there is no
per-field class hierarchy.
"""
import logging
import re
from datetime import date
from typing import Any, Callable, Iterable, Optional

from naming_review.errors import ValidationError
from naming_review.schemas.form_configuration import FieldDefinition, FieldType

logger = logging.getLogger(__name__)

OPTION_KINDS = {FieldType.SELECT, FieldType.RADIO}

_WHITESPACE = re.compile(r"\s")


def normalize_field_definitions(fields: Iterable[Any]) -> list[dict]:
    """
    Validate and normalize a configuration's field list.

    - names are trimmed and must not contain whitespace
    - names are unique within the configuration
    - select/radio fields declare at least one option
    - content blocks carry content; they get a generated name when unnamed
      and are never required

    Returns:
        List of field dicts ready to be stored

    Raises:
        ValidationError: With one entry per offending field
    """
    definitions = [
        f if isinstance(f, FieldDefinition) else FieldDefinition.model_validate(f)
        for f in fields
    ]
    if not definitions:
        raise ValidationError.single("fields", "A form must have at least one field")

    errors: list[dict[str, str]] = []
    seen: set[str] = set()
    normalized: list[dict] = []

    for position, field in enumerate(definitions):
        data = field.model_dump(mode="json")
        name = (field.name or "").strip()

        if field.field_type == FieldType.CONTENT_BLOCK:
            if not (field.content or "").strip():
                errors.append({"field": name or f"fields[{position}]", "message": "Content blocks require content"})
            if not name:
                name = f"content_{position}"
            data["required"] = False
        elif not name:
            errors.append({"field": f"fields[{position}]", "message": "Field name is required"})
            continue

        if _WHITESPACE.search(name):
            errors.append({"field": name, "message": "Field name must not contain whitespace"})
        elif name in seen:
            errors.append({"field": name, "message": "Duplicate field name"})
        seen.add(name)

        if field.field_type in OPTION_KINDS and not field.options:
            errors.append({"field": name, "message": f"{field.field_type.value} fields require options"})

        if field.pattern:
            try:
                re.compile(field.pattern)
            except re.error:
                errors.append({"field": name, "message": "Invalid validation pattern"})

        if field.min_length is not None and field.max_length is not None and field.min_length > field.max_length:
            errors.append({"field": name, "message": "min_length exceeds max_length"})

        data["name"] = name
        if not data.get("label"):
            data["label"] = name
        normalized.append(data)

    if errors:
        raise ValidationError(errors)
    return normalized


def is_empty(value: Any) -> bool:
    """Missing, blank, empty collection, or an unticked checkbox."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False


def _check_text(field: FieldDefinition, value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return "Must be text"
    if field.min_length is not None and len(value) < field.min_length:
        return f"Must be at least {field.min_length} characters"
    if field.max_length is not None and len(value) > field.max_length:
        return f"Must be at most {field.max_length} characters"
    if field.pattern and not re.fullmatch(field.pattern, value):
        return "Does not match the required format"
    return None


def _check_option(field: FieldDefinition, value: Any) -> Optional[str]:
    if value not in (field.options or []):
        return f"Must be one of: {', '.join(field.options or [])}"
    return None


def _check_checkbox(field: FieldDefinition, value: Any) -> Optional[str]:
    # Checkbox groups submit a list of ticked options, single boxes a bool
    if field.options:
        if not isinstance(value, list):
            return "Must be a list of options"
        invalid = [v for v in value if v not in field.options]
        if invalid:
            return f"Invalid options: {', '.join(map(str, invalid))}"
        return None
    if not isinstance(value, bool):
        return "Must be true or false"
    return None


def _check_file(field: FieldDefinition, value: Any) -> Optional[str]:
    if isinstance(value, str):
        return None
    if isinstance(value, dict) and value.get("filename"):
        return None
    return "Must be a file reference"


def _check_date(field: FieldDefinition, value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return "Must be an ISO date (YYYY-MM-DD)"
    try:
        date.fromisoformat(value)
    except ValueError:
        return "Must be an ISO date (YYYY-MM-DD)"
    return None


def _check_number(field: FieldDefinition, value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return "Must be a number"
    if isinstance(value, (int, float)):
        return None
    try:
        float(str(value))
    except ValueError:
        return "Must be a number"
    return None


_VALUE_CHECKS: dict[FieldType, Callable[[FieldDefinition, Any], Optional[str]]] = {
    FieldType.TEXT: _check_text,
    FieldType.TEXTAREA: _check_text,
    FieldType.SELECT: _check_option,
    FieldType.RADIO: _check_option,
    FieldType.CHECKBOX: _check_checkbox,
    FieldType.FILE: _check_file,
    FieldType.DATE: _check_date,
    FieldType.NUMBER: _check_number,
}


def validate_submission(fields: Iterable[dict], values: dict[str, Any]) -> dict[str, Any]:
    """
    Check submitted values against a field snapshot.

    Args:
        fields: Stored field definitions (dicts)
        values: Field name -> submitted value

    Returns:
        The accepted values, restricted to declared non-content fields

    Raises:
        ValidationError: Listing every failing field
    """
    errors: list[dict[str, str]] = []
    accepted: dict[str, Any] = {}

    for raw in fields:
        field = FieldDefinition.model_validate(raw)
        if field.field_type == FieldType.CONTENT_BLOCK:
            continue

        value = values.get(field.name)
        if is_empty(value):
            if field.required:
                errors.append({"field": field.name, "message": f"{field.label or field.name} is required"})
            elif value is not None:
                accepted[field.name] = value
            continue

        message = _VALUE_CHECKS[field.field_type](field, value)
        if message:
            errors.append({"field": field.name, "message": message})
        else:
            accepted[field.name] = value

    ignored = set(values) - set(accepted) - {e["field"] for e in errors}
    if ignored:
        logger.debug(f"Dropping undeclared submission keys: {sorted(ignored)}")

    if errors:
        raise ValidationError(errors)
    return accepted
