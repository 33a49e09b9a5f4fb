"""Registry data models — store keys and registration summaries."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from updater_registry.spec.schema import (
    OPTIONAL_FIELDS,
    SOURCE_CUSTOM_URL,
    SOURCE_STORE,
)

DESCRIPTOR_PREFIX = "updater_"
DESCRIPTOR_SUFFIX = ".json"


def store_key(oem_name: str, updater_name: str) -> str:
    """Case-folded identity of a registration, used as its directory name."""
    return f"{oem_name.lower()}_{updater_name.lower()}"


def descriptor_file_name(updater_name: str) -> str:
    return f"{DESCRIPTOR_PREFIX}{updater_name}{DESCRIPTOR_SUFFIX}"


class RegistrationSummary(BaseModel):
    """Nullable projection of a stored descriptor onto the canonical fields.

    Field aliases are the descriptor property names; dump with
    ``by_alias=True`` to get the descriptor spelling back.
    """

    model_config = ConfigDict(populate_by_name=True)

    # Identity
    oem_name: str = Field(alias="OEMName")
    updater_name: str = Field(alias="UpdaterName")

    # Required
    pfn: str = Field(alias="PFN")
    registration_version: int = Field(alias="RegistrationVersion")
    source: str = Field(alias="Source")
    scenario: str = Field(alias="Scenario")

    # Conditional
    endpoint: Optional[str] = Field(default=None, alias="Endpoint")
    product_id: Optional[str] = Field(default=None, alias="ProductId")

    # Optional
    allowed_in_oobe: Optional[bool] = Field(default=None, alias="AllowedInOobe")
    skip_if_present: Optional[bool] = Field(default=None, alias="SkipIfPresent")
    honor_deprovisioning: Optional[bool] = Field(default=None, alias="HonorDeprovisioning")
    max_retry_count: Optional[int] = Field(default=None, alias="MaxRetryCount")
    timeout_duration_in_minutes: Optional[int] = Field(
        default=None, alias="TimeoutDurationInMinutes"
    )
    priority: Optional[int] = Field(default=None, alias="Priority")
    minimum_allowed_build_version: Optional[int] = Field(
        default=None, alias="MinimumAllowedBuildVersion"
    )
    architecture: Optional[str] = Field(default=None, alias="Architecture")
    included_regions: Optional[list[str]] = Field(default=None, alias="IncludedRegions")
    excluded_regions: Optional[list[str]] = Field(default=None, alias="ExcludedRegions")
    included_editions: Optional[list[int]] = Field(default=None, alias="IncludedEditions")
    excluded_editions: Optional[list[int]] = Field(default=None, alias="ExcludedEditions")

    @property
    def key(self) -> str:
        return store_key(self.oem_name, self.updater_name)

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> RegistrationSummary:
        """Project a stored descriptor document onto the summary fields.

        ``Endpoint`` is kept only for CustomURL sources and ``ProductId``
        only for Store sources; optional properties absent from the
        document stay null.
        """
        source = document["Source"]
        data = {
            "OEMName": document["OEMName"],
            "UpdaterName": document["UpdaterName"],
            "PFN": document["PFN"],
            "RegistrationVersion": document["RegistrationVersion"],
            "Source": source,
            "Scenario": document["Scenario"],
            "Endpoint": document.get("Endpoint") if source == SOURCE_CUSTOM_URL else None,
            "ProductId": document.get("ProductId") if source == SOURCE_STORE else None,
        }
        for name in OPTIONAL_FIELDS:
            data[name] = document.get(name)
        return cls(**data)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
