"""
Tests for field definition normalization and submission validation.

Validates:
- Definition rules (names, options, content blocks, constraints)
- Per-kind value checks
- Every failing field is reported, not just the first
- Undeclared keys and content blocks are dropped from accepted values
"""
import pytest

from naming_review.errors import ValidationError
from naming_review.services.form_validation import (
    is_empty,
    normalize_field_definitions,
    validate_submission,
)


# =============================================================================
# Field Definitions
# =============================================================================

def test_normalize_trims_names_and_defaults_label():
    fields = normalize_field_definitions([{"name": "  proposedName ", "field_type": "text"}])

    assert fields[0]["name"] == "proposedName"
    assert fields[0]["label"] == "proposedName"


def test_normalize_requires_at_least_one_field():
    with pytest.raises(ValidationError) as exc_info:
        normalize_field_definitions([])

    assert exc_info.value.fields == ["fields"]


def test_normalize_rejects_whitespace_in_name():
    with pytest.raises(ValidationError) as exc_info:
        normalize_field_definitions([{"name": "proposed name", "field_type": "text"}])

    assert exc_info.value.fields == ["proposed name"]


def test_normalize_rejects_duplicate_names():
    with pytest.raises(ValidationError) as exc_info:
        normalize_field_definitions([
            {"name": "a", "field_type": "text"},
            {"name": "a", "field_type": "textarea"},
        ])

    assert "Duplicate field name" in exc_info.value.errors[0]["message"]


def test_normalize_select_and_radio_need_options():
    with pytest.raises(ValidationError) as exc_info:
        normalize_field_definitions([
            {"name": "line", "field_type": "select"},
            {"name": "ipr", "field_type": "radio", "options": []},
        ])

    assert exc_info.value.fields == ["line", "ipr"]


def test_normalize_content_block_gets_name_and_is_never_required():
    fields = normalize_field_definitions([
        {"name": "title", "field_type": "text"},
        {"field_type": "content-block", "content": "Read the guidelines", "required": True},
    ])

    assert fields[1]["name"] == "content_1"
    assert fields[1]["required"] is False


def test_normalize_content_block_needs_content():
    with pytest.raises(ValidationError):
        normalize_field_definitions([{"field_type": "content-block", "content": "  "}])


def test_normalize_rejects_bad_pattern_and_inverted_lengths():
    with pytest.raises(ValidationError) as exc_info:
        normalize_field_definitions([
            {"name": "code", "field_type": "text", "pattern": "[a-"},
            {"name": "title", "field_type": "text", "min_length": 10, "max_length": 5},
        ])

    assert exc_info.value.fields == ["code", "title"]


def test_normalize_unknown_kind_is_rejected():
    with pytest.raises(Exception):
        normalize_field_definitions([{"name": "x", "field_type": "slider"}])


# =============================================================================
# Submission Values
# =============================================================================

FIELDS = normalize_field_definitions([
    {"name": "a", "field_type": "text", "required": True},
    {"name": "b", "field_type": "text", "required": True},
    {"name": "line", "field_type": "select", "options": ["Audit", "Tax"]},
    {"name": "tags", "field_type": "checkbox", "options": ["x", "y"]},
    {"name": "agree", "field_type": "checkbox"},
    {"name": "when", "field_type": "date"},
    {"name": "budget", "field_type": "number"},
    {"name": "code", "field_type": "text", "pattern": "[A-Z]{3}", "max_length": 3},
    {"name": "brief", "field_type": "file"},
    {"field_type": "content-block", "content": "Info"},
])


def test_missing_required_field_is_named():
    with pytest.raises(ValidationError) as exc_info:
        validate_submission(FIELDS, {"a": "x"})

    assert exc_info.value.fields == ["b"]


def test_all_failures_are_collected():
    with pytest.raises(ValidationError) as exc_info:
        validate_submission(FIELDS, {
            "a": "",
            "b": "ok",
            "line": "Consulting",
            "tags": ["x", "z"],
            "when": "31/12/2025",
            "budget": "lots",
            "code": "abc",
        })

    assert exc_info.value.fields == ["a", "line", "tags", "when", "budget", "code"]


def test_valid_submission_drops_undeclared_keys():
    accepted = validate_submission(FIELDS, {
        "a": "x",
        "b": "y",
        "line": "Tax",
        "tags": ["y"],
        "agree": True,
        "when": "2025-06-01",
        "budget": "12.5",
        "code": "ABC",
        "brief": {"filename": "brief.pdf"},
        "content_9": "ignored",
        "extra": "ignored",
    })

    assert accepted == {
        "a": "x",
        "b": "y",
        "line": "Tax",
        "tags": ["y"],
        "agree": True,
        "when": "2025-06-01",
        "budget": "12.5",
        "code": "ABC",
        "brief": {"filename": "brief.pdf"},
    }


def test_single_checkbox_must_be_bool():
    with pytest.raises(ValidationError) as exc_info:
        validate_submission(FIELDS, {"a": "x", "b": "y", "agree": "yes"})

    assert exc_info.value.fields == ["agree"]


def test_number_rejects_bool():
    with pytest.raises(ValidationError):
        validate_submission(FIELDS, {"a": "x", "b": "y", "budget": True})


def test_is_empty():
    assert is_empty(None)
    assert is_empty("   ")
    assert is_empty([])
    assert is_empty(False)
    assert not is_empty(0)
    assert not is_empty("x")
