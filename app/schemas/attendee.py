"""Roster schemas."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.sanitization import sanitize_name, sanitize_optional_text


class AttendeeCreate(BaseModel):
    """One roster row as read from the import spreadsheet."""

    name: str = Field(..., min_length=1, max_length=400)
    title: Optional[str] = Field(None, max_length=400)
    district: Optional[str] = Field(None, max_length=400)
    region: Optional[str] = Field(None, max_length=400)

    @field_validator('name')
    @classmethod
    def sanitize_name_field(cls, v: str) -> str:
        return sanitize_name(v)

    @field_validator('title', 'district', 'region')
    @classmethod
    def sanitize_optional_fields(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_optional_text(v)


class AttendeeUpdate(BaseModel):
    """Administrative edit. Omitted fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=400)
    title: Optional[str] = Field(None, max_length=400)
    district: Optional[str] = Field(None, max_length=400)
    region: Optional[str] = Field(None, max_length=400)

    @field_validator('name')
    @classmethod
    def sanitize_name_field(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return sanitize_name(v)

    @field_validator('title', 'district', 'region')
    @classmethod
    def sanitize_optional_fields(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_optional_text(v)


class AttendeeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    title: Optional[str] = None
    district: Optional[str] = None
    region: Optional[str] = None
    scanned: bool
    scan_time: Optional[datetime] = Field(None, alias="scanTime")
    scanned_times: int = Field(..., alias="scannedTimes")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class AttendanceSummary(BaseModel):
    total: int
    checked_in: int
    not_checked_in: int
    total_scans: int
    duplicate_scans: int
    flagged: List[AttendeeResponse]
