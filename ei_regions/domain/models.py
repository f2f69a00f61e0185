"""
domain/models.py
──────────────────────────────────────────────────────────────────────────────
Pure domain objects — Pydantic models with no imports from adapters or ports.

These models are the lingua franca of the entire system:
  • the source adapter produces undated records from scraped HTML
  • the store adapter persists and rehydrates dated records
  • services compose them into a PostalResult
  • interfaces (API, CLI, Streamlit) serialise them

Field names are snake_case (matching the table columns); the JSON aliases
keep the field names of the original public API (PostalCode,
EIEconomicRegionName, EconomicRegionDetails …).  Statistic values are opaque
text copied verbatim from the source page.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


# ── Input ──────────────────────────────────────────────────────────────────────

class LookupRequest(BaseModel):
    """Validated input at the API, CLI and Streamlit boundaries.

    The code is normalised before the length checks, so "  " is rejected
    and "k1a 0a1" becomes "K1A0A1".
    """

    postal_code: str = Field(..., min_length=1, max_length=16,
                             description="Canadian postal code, any spacing or case")

    @field_validator("postal_code", mode="before")
    @classmethod
    def normalise_code(cls, v):
        if isinstance(v, str):
            return "".join(v.split()).upper()
        return v


# ── Cached rows ────────────────────────────────────────────────────────────────

class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date_retrieved: Optional[datetime] = None

    @field_validator("*", mode="before")
    @classmethod
    def null_text_to_empty(cls, v, info: ValidationInfo):
        # Nullable TEXT columns come back as None; required ones stay invalid.
        if v is None and cls.model_fields[info.field_name].default == "":
            return ""
        return v

    def stamped(self, now: datetime):
        """Return a copy with date_retrieved set to *now*."""
        return self.model_copy(update={"date_retrieved": now})

    def to_dict(self) -> dict:
        """Serialise to a JSON-safe dict using the public field names."""
        return self.model_dump(mode="json", by_alias=True)


class RegionRecord(_Record):
    """One row of economic_region_data: EI statistics for an economic region."""

    economic_region_name:   str = Field(..., alias="EconomicRegionName")
    province:               str = Field("", alias="Province")
    economic_region_code:   str = Field("", alias="EconomicRegionCode")
    unemployment_rate:      str = Field("", alias="UnemploymentRate")
    insured_hours_required: str = Field("", alias="InsuredHoursRequired")
    min_weeks_payable:      str = Field("", alias="MinWeeksPayable")
    max_weeks_payable:      str = Field("", alias="MaxWeeksPayable")
    best_weeks_required:    str = Field("", alias="BestWeeksRequired")


class PostalRecord(_Record):
    """One row of postal_code_data: census geography and EI region reference.

    The region is referenced by name *and* locator (denormalised) so the
    region row can be refreshed without touching this one.
    """

    postal_code:             str = Field(..., alias="PostalCode")
    census_subdivision_name: str = Field("", alias="CensusSubdivisionName")
    common_name:             str = Field("", alias="CommonName")
    census_division_name:    str = Field("", alias="CensusDivisionName")
    ei_economic_region_name: str = Field(..., alias="EIEconomicRegionName")
    ei_economic_region_url:  str = Field(..., alias="EIEconomicRegionURL")


# ── Lookup output ──────────────────────────────────────────────────────────────

class PostalResult(PostalRecord):
    """Complete response from PostalLookup.lookup().

    Always carries its region detail; a lookup that cannot produce one fails
    instead of returning a partial result.
    """

    economic_region_details: RegionRecord = Field(..., alias="EconomicRegionDetails")

    @classmethod
    def compose(cls, postal: PostalRecord, region: RegionRecord) -> "PostalResult":
        return cls(
            **postal.model_dump(),
            economic_region_details=region,
        )
