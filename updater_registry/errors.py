"""Error kinds raised and reported by the registration manager."""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    # Host preconditions
    PERMISSION_DENIED = "PermissionDenied"
    UNSUPPORTED_PLATFORM = "UnsupportedPlatform"

    # Descriptor validation
    DUPLICATE_PROPERTY = "DuplicateProperty"
    MALFORMED_JSON = "MalformedJson"
    PROPERTY_CASE_MISMATCH = "PropertyCaseMismatch"
    MISSING_REQUIRED_FIELD = "MissingRequiredField"
    TYPE_MISMATCH = "TypeMismatch"
    PATTERN_MISMATCH = "PatternMismatch"
    OUT_OF_RANGE = "OutOfRange"
    INVALID_ENUM_VALUE = "InvalidEnumValue"
    CONDITIONAL_FIELD_MISSING = "ConditionalFieldMissing"
    CONFLICTING_FIELDS = "ConflictingFields"
    INVALID_SET = "InvalidSet"

    # Store
    STORE_NOT_INITIALIZED = "StoreNotInitialized"
    ALREADY_EXISTS = "AlreadyExists"
    NOT_FOUND = "NotFound"
    INVALID_ARGUMENTS = "InvalidArguments"
    DELETION_FAILED = "DeletionFailed"
    SUMMARY_RETRIEVAL_FAILED = "SummaryRetrievalFailed"


class RegistrationError(Exception):
    """A failed operation, with a machine-readable kind and a readable detail."""

    def __init__(self, kind: ErrorKind, detail: str):
        super().__init__(detail)
        self.kind = kind
        self.detail = detail

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.detail}"
