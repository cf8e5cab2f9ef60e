"""
Utility Functions
=================
Schema validation helpers shared by config loading.
"""

from .schema_validation import (
    validate_against_schema,
    validate_project_config_payload,
)

__all__ = [
    "validate_against_schema",
    "validate_project_config_payload",
]
