"""Pydantic v2 schemas for RFQ distribution endpoints."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


class ProjectInfo(BaseModel):
    """Requester and project fields submitted with a quote request.

    Required-field and email checks happen in the service so that they are
    reported as 400 validation errors, like every other input problem on
    this endpoint.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    requester_name: str = Field("", alias="requesterName")
    requester_email: str = Field("", alias="requesterEmail")
    requester_phone: str = Field("", alias="requesterPhone")
    project_name: str = Field("", alias="projectName")
    project_address: str = Field(
        "",
        alias="siteAddress",
        validation_alias=AliasChoices("siteAddress", "projectAddress", "project_address"),
    )
    needed_by: str = Field("", alias="neededBy")
    notes: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _as_text(cls, value: object) -> str:
        # Phone numbers regularly arrive as JSON numbers
        return "" if value is None else str(value).strip()


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class RfqCreateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    rfq_id: str = Field(alias="rfqId")
    folder_link: str = Field("", alias="folderLink")
    file_links: list[str] = Field(default_factory=list, alias="fileLinks")
    emails_sent: int = Field(0, alias="emailsSent")
    emails_skipped: int = Field(0, alias="emailsSkipped")
    emails_failed: int = Field(0, alias="emailsFailed")
    sheet_updated: bool = Field(False, alias="sheetUpdated")
    award_email_sent: bool = Field(False, alias="awardEmailSent")


class ProjectSummaryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_name: str = Field("", alias="projectName")
    project_address: str = Field("", alias="siteAddress")
    needed_by: str = Field("", alias="neededBy")
    notes: str = ""
    requester_name: str = Field("", alias="requesterName")
    requester_email: str = Field("", alias="requesterEmail")
    requester_phone: str = Field("", alias="requesterPhone")
    rfq_date: str = Field("", alias="rfqDate")


class VendorItemsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    rfq_id: str = Field(alias="rfqId")
    vendor_name: str = Field(alias="vendorName")
    project: ProjectSummaryResponse
    items: list[dict]
