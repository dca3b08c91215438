"""Error envelope shared by every endpoint."""

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """A single field-level or contextual error detail."""

    field: str | None = None
    message: str


class ErrorBody(BaseModel):
    code: str
    message: str
    details: list[ErrorDetail] = []
    request_id: str = Field(alias="requestId")

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """Top-level error envelope: ``{"error": {...}}``."""

    error: ErrorBody


# Documented on routes whose failures are part of the workflow contract
ERROR_RESPONSES: dict[int | str, dict] = {
    400: {"model": ErrorResponse, "description": "Malformed or incomplete input"},
    401: {"model": ErrorResponse, "description": "Invalid or expired link token"},
    403: {"model": ErrorResponse, "description": "Link token issued for another RFQ or role"},
    404: {"model": ErrorResponse, "description": "RFQ, vendor or reply rows not found"},
    500: {"model": ErrorResponse, "description": "Server configuration error"},
}
