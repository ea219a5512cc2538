"""
Guidance document types.
"""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class GuidanceEntry:
    """A reference to one citable guidance document."""

    reference: str
    label: str


class GuidanceMetadata(BaseModel):
    """Version information shipped alongside the guidance documents."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    version: str = Field("unknown", description="Guidance bundle version")
    last_checked: str = Field(
        "unknown",
        alias="lastChecked",
        description="When the guidance was last compared against WA DOR",
    )
    note: str | None = Field(None, description="Free-form remark")
