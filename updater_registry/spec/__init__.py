"""Descriptor specification for updater registrations.

This package holds the two halves of descriptor checking:
1. Schema — the field schema and its JSON Schema export
2. Validator — the ordered rule engine that reports the first violation
"""

SCHEMA_VERSION = "1.0.0"
