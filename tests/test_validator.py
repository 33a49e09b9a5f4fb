"""Tests for the registration descriptor validator."""

import json
import tempfile
from pathlib import Path

import pytest

from updater_registry.errors import ErrorKind, RegistrationError
from updater_registry.spec.schema import OPTIONAL_FIELDS, REQUIRED_FIELDS
from updater_registry.spec.schema_validator import validate_descriptor, validate_file


def _make_descriptor(**overrides) -> dict:
    """Build a minimal valid Store descriptor."""
    data = {
        "OEMName": "MS",
        "UpdaterName": "Contoso",
        "PFN": "Microsoft.MicrosoftContoso_8wekyb3d8bbwe",
        "RegistrationVersion": 1,
        "Source": "Store",
        "ProductId": "1A2B3C4D5E6F",
        "Scenario": "Update",
    }
    for key, value in overrides.items():
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
    return data


def _kind(data: dict) -> ErrorKind | None:
    result = validate_descriptor(json.dumps(data))
    return result.error.kind if result.error else None


def test_valid_store_descriptor():
    result = validate_descriptor(json.dumps(_make_descriptor(Priority=50)))
    assert result.passed
    assert result.descriptor.Priority == 50
    assert result.descriptor.has("Priority")
    assert not result.descriptor.has("Endpoint")


def test_valid_custom_url_descriptor():
    data = _make_descriptor(
        Source="CustomURL", ProductId=None, Endpoint="https://contoso.com/updater.msix"
    )
    assert _kind(data) is None


def test_valid_with_every_optional_field():
    data = _make_descriptor(
        Scenario="Acquisition",
        AllowedInOobe=True,
        SkipIfPresent=False,
        HonorDeprovisioning=True,
        MaxRetryCount=5,
        TimeoutDurationInMinutes=30,
        Priority=100,
        MinimumAllowedBuildVersion=100000,
        Architecture="arm64",
        IncludedRegions=["US", "CA"],
        ExcludedEditions=[4, 48],
    )
    result = validate_descriptor(json.dumps(data))
    assert result.passed, result.summary()


# --- Structural ---


def test_duplicate_property():
    raw = '{"OEMName": "MS", "OEMName": "Other", "UpdaterName": "Contoso"}'
    result = validate_descriptor(raw)
    assert result.error.kind == ErrorKind.DUPLICATE_PROPERTY
    assert result.error.field == "OEMName"


def test_duplicate_checked_before_parse():
    result = validate_descriptor('{"A": 1, "A": 2, ')
    assert result.error.kind == ErrorKind.DUPLICATE_PROPERTY


def test_malformed_json():
    result = validate_descriptor('{"OEMName": "MS",')
    assert result.error.kind == ErrorKind.MALFORMED_JSON
    assert "Invalid JSON" in result.error.message


def test_top_level_must_be_object():
    result = validate_descriptor("[1, 2, 3]")
    assert result.error.kind == ErrorKind.MALFORMED_JSON


def test_property_case_mismatch():
    data = _make_descriptor(OEMName=None)
    data["oemName"] = "MS"
    assert _kind(data) == ErrorKind.PROPERTY_CASE_MISMATCH


def test_unknown_properties_are_ignored():
    assert _kind(_make_descriptor(Comment="internal build")) is None


# --- Required fields ---


@pytest.mark.parametrize("name", REQUIRED_FIELDS)
def test_missing_required_field(name):
    data = _make_descriptor(**{name: None})
    assert _kind(data) == ErrorKind.MISSING_REQUIRED_FIELD


def test_oem_name_must_be_string():
    assert _kind(_make_descriptor(OEMName=42)) == ErrorKind.TYPE_MISMATCH


def test_pfn_must_be_string():
    assert _kind(_make_descriptor(PFN=["a"])) == ErrorKind.TYPE_MISMATCH


def test_registration_version_type_checked_independently():
    # Valid strings do not excuse a non-integer version
    assert _kind(_make_descriptor(RegistrationVersion="1")) == ErrorKind.TYPE_MISMATCH
    assert _kind(_make_descriptor(RegistrationVersion=1.5)) == ErrorKind.TYPE_MISMATCH
    assert _kind(_make_descriptor(RegistrationVersion=True)) == ErrorKind.TYPE_MISMATCH


def test_name_pattern():
    assert _kind(_make_descriptor(OEMName="Contoso Ltd")) == ErrorKind.PATTERN_MISMATCH
    assert _kind(_make_descriptor(UpdaterName="up.dater")) == ErrorKind.PATTERN_MISMATCH
    assert _kind(_make_descriptor(UpdaterName="Contoso\n")) == ErrorKind.PATTERN_MISMATCH
    assert _kind(_make_descriptor(UpdaterName="contoso_updater-2")) is None


def test_registration_version_range():
    assert _kind(_make_descriptor(RegistrationVersion=0)) == ErrorKind.OUT_OF_RANGE
    assert _kind(_make_descriptor(RegistrationVersion=-3)) == ErrorKind.OUT_OF_RANGE


def test_enums_are_case_sensitive():
    assert _kind(_make_descriptor(Scenario="update")) == ErrorKind.INVALID_ENUM_VALUE
    assert _kind(_make_descriptor(Source="store")) == ErrorKind.INVALID_ENUM_VALUE
    assert _kind(_make_descriptor(Scenario="StubAcquisition")) is None


# --- Conditional fields ---


def test_custom_url_requires_endpoint():
    data = _make_descriptor(Source="CustomURL", ProductId=None)
    assert _kind(data) == ErrorKind.CONDITIONAL_FIELD_MISSING


@pytest.mark.parametrize(
    "endpoint", ["http://contoso.com", "ftp://contoso.com", "HTTPS://contoso.com", ""]
)
def test_endpoint_must_be_https(endpoint):
    data = _make_descriptor(Source="CustomURL", Endpoint=endpoint)
    assert _kind(data) == ErrorKind.PATTERN_MISMATCH


def test_store_requires_product_id():
    data = _make_descriptor(ProductId=None)
    assert _kind(data) == ErrorKind.CONDITIONAL_FIELD_MISSING


def test_store_ignores_endpoint():
    assert _kind(_make_descriptor(Endpoint="not a url")) is None


# --- Optional fields ---


@pytest.mark.parametrize(
    "name,low,high",
    [
        ("MaxRetryCount", 1, 5),
        ("TimeoutDurationInMinutes", 1, 30),
        ("MinimumAllowedBuildVersion", 1, 100000),
        ("Priority", 1, 100),
    ],
)
def test_integer_ranges(name, low, high):
    assert _kind(_make_descriptor(**{name: low})) is None
    assert _kind(_make_descriptor(**{name: high})) is None
    assert _kind(_make_descriptor(**{name: low - 1})) == ErrorKind.OUT_OF_RANGE
    assert _kind(_make_descriptor(**{name: high + 1})) == ErrorKind.OUT_OF_RANGE
    assert _kind(_make_descriptor(**{name: str(low)})) == ErrorKind.TYPE_MISMATCH


def test_priority_zero_is_out_of_range():
    result = validate_descriptor(json.dumps(_make_descriptor(Priority=0)))
    assert result.error.kind == ErrorKind.OUT_OF_RANGE
    assert "Priority" in result.error.message


def test_regions_conflict_regardless_of_contents():
    assert _kind(_make_descriptor(IncludedRegions=["US"], ExcludedRegions=["US"])) == (
        ErrorKind.CONFLICTING_FIELDS
    )
    assert _kind(_make_descriptor(IncludedRegions=[], ExcludedRegions=[1, 1])) == (
        ErrorKind.CONFLICTING_FIELDS
    )


def test_editions_conflict():
    data = _make_descriptor(IncludedEditions=[4], ExcludedEditions=[48])
    assert _kind(data) == ErrorKind.CONFLICTING_FIELDS


@pytest.mark.parametrize(
    "name,value",
    [
        ("IncludedRegions", []),
        ("IncludedRegions", ["US", "US"]),
        ("ExcludedRegions", ["US", 1]),
        ("ExcludedRegions", "US"),
        ("IncludedEditions", [4, 4]),
        ("IncludedEditions", ["4"]),
        ("ExcludedEditions", [True]),
        ("ExcludedEditions", []),
    ],
)
def test_invalid_sets(name, value):
    assert _kind(_make_descriptor(**{name: value})) == ErrorKind.INVALID_SET


def test_architecture_enum():
    assert _kind(_make_descriptor(Architecture="amd64")) is None
    assert _kind(_make_descriptor(Architecture="x86")) == ErrorKind.INVALID_ENUM_VALUE
    assert _kind(_make_descriptor(Architecture="AMD64")) == ErrorKind.INVALID_ENUM_VALUE


@pytest.mark.parametrize("name", ["AllowedInOobe", "SkipIfPresent", "HonorDeprovisioning"])
def test_boolean_fields(name):
    assert _kind(_make_descriptor(**{name: "true"})) == ErrorKind.TYPE_MISMATCH
    assert _kind(_make_descriptor(**{name: 1})) == ErrorKind.TYPE_MISMATCH


def test_honor_deprovisioning_conflicts_with_update():
    assert _kind(_make_descriptor(HonorDeprovisioning=True)) == ErrorKind.CONFLICTING_FIELDS
    assert _kind(_make_descriptor(HonorDeprovisioning=False)) is None
    assert _kind(_make_descriptor(HonorDeprovisioning=True, Scenario="Acquisition")) is None


def test_first_violation_wins():
    # Missing PFN is reported before the out-of-range Priority
    data = _make_descriptor(PFN=None, Priority=0)
    assert _kind(data) == ErrorKind.MISSING_REQUIRED_FIELD


def test_raise_for_error():
    result = validate_descriptor(json.dumps(_make_descriptor(Priority=0)))
    with pytest.raises(RegistrationError) as exc_info:
        result.raise_for_error()
    assert exc_info.value.kind == ErrorKind.OUT_OF_RANGE
    assert str(exc_info.value).startswith("[OutOfRange]")


def test_optional_fields_absent_by_default():
    descriptor = validate_descriptor(json.dumps(_make_descriptor())).descriptor
    assert all(not descriptor.has(name) for name in OPTIONAL_FIELDS)
    assert descriptor.Priority is None


# --- Files ---


def test_validate_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "updater.json"
        path.write_text(json.dumps(_make_descriptor()), encoding="utf-8")
        assert validate_file(path).passed


def test_validate_file_with_byte_order_mark():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "updater.json"
        path.write_text(json.dumps(_make_descriptor()), encoding="utf-8-sig")
        assert path.read_bytes().startswith(b"\xef\xbb\xbf")
        result = validate_file(path)
        assert result.passed, result.summary()


def test_validate_missing_file():
    result = validate_file("/nonexistent/updater.json")
    assert result.error.kind == ErrorKind.MALFORMED_JSON
