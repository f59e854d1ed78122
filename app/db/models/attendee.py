"""Roster attendee model."""
from datetime import datetime, timezone as tz
from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, Integer, String

from app.core.constants import MAX_TEXT_FIELD_LENGTH, RECORD_ID_LENGTH
from app.core.utils import new_record_id
from app.db.base import Base


class Attendee(Base):
    __tablename__ = "attendees"

    id = Column(String(RECORD_ID_LENGTH), primary_key=True, default=new_record_id)  # Encoded in the badge QR
    name = Column(String(MAX_TEXT_FIELD_LENGTH), nullable=False)
    title = Column(String(MAX_TEXT_FIELD_LENGTH), nullable=True)
    district = Column(String(MAX_TEXT_FIELD_LENGTH), nullable=True)
    region = Column(String(MAX_TEXT_FIELD_LENGTH), nullable=True)

    # Check-in state, written only through the conditional update in SqlRecordStore
    scanned = Column(Boolean, nullable=False, default=False)
    scan_time = Column(DateTime(timezone=True), nullable=True)
    scanned_times = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    __table_args__ = (
        Index("idx_attendees_created_at", "created_at"),
        CheckConstraint("scanned_times >= 0", name="ck_attendees_scanned_times_non_negative"),
    )
