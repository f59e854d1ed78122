"""Database models."""
from app.db.models.attendee import Attendee

__all__ = ["Attendee"]
