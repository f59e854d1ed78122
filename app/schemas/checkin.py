"""Check-in schemas."""
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.sanitization import sanitize_record_id


class CheckinRequest(BaseModel):
    """Body posted by a scanner after decoding a badge."""

    model_config = ConfigDict(populate_by_name=True)

    # Optional here so a missing id is reported as "Missing required fields"
    id: Optional[str] = None
    scan_time: Optional[datetime] = Field(None, alias="scanTime")

    @field_validator('id')
    @classmethod
    def sanitize_id_field(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_record_id(v)


class ScannedUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    scan_time: Optional[datetime] = Field(None, alias="scanTime")
    scanned_times: int = Field(..., alias="scannedTimes")


class CheckinResponse(BaseModel):
    status: Literal["success", "already_scanned"]
    message: str
    user: ScannedUser
