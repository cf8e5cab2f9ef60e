"""
Schema Validation Utilities
===========================
JSON Schema loading and validation helpers.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

SCHEMAS_DIR = Path(__file__).resolve().parent.parent / "schemas"

# Errors listed in one message before the rest are summarized.
MAX_REPORTED_ERRORS = 3


@lru_cache(maxsize=8)
def _validator_for(schema_filename: str) -> Draft202012Validator:
    """Load a schema from zmpack/schemas and build a validator for it.

    Raises:
        FileNotFoundError: When the schema file is missing.
        ValueError: When the schema is not a JSON object or is not a valid schema.
    """
    schema_path = (SCHEMAS_DIR / schema_filename).resolve()
    if not schema_path.is_relative_to(SCHEMAS_DIR):
        raise ValueError(f"Schema path escapes schemas directory: {schema_filename}")
    if not schema_path.is_file():
        raise FileNotFoundError(f"Schema not found: {schema_filename}")

    try:
        schema = json.loads(schema_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Failed to load schema {schema_filename}: {e}")
    if not isinstance(schema, dict):
        raise ValueError(f"Schema {schema_filename} must be a JSON object")

    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def _describe(error: ValidationError) -> str:
    path = "/".join(str(p) for p in error.absolute_path)
    return f"at '{path}': {error.message}" if path else error.message


def validate_against_schema(payload: Any, schema_filename: str) -> None:
    """Validate payload against a JSON Schema under zmpack/schemas.

    Raises:
        ValueError: When payload fails validation. The message names the first
            few failing locations in document order.
    """
    validator = _validator_for(schema_filename)
    errors: List[ValidationError] = sorted(
        validator.iter_errors(payload),
        key=lambda e: [str(p) for p in e.absolute_path],
    )
    if not errors:
        return

    details = [_describe(e) for e in errors[:MAX_REPORTED_ERRORS]]
    more = len(errors) - len(details)
    if more > 0:
        details.append(f"and {more} more")
    raise ValueError("Validation failed: " + "; ".join(details))


def validate_project_config_payload(payload: Dict[str, Any]) -> None:
    """Validate a decoded zmpack.json payload.

    Per-action arity is checked when actions are decoded, so those messages
    can name the action tag.
    """
    validate_against_schema(payload, "zmpack_config.schema.json")
