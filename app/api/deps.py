"""Shared API dependencies."""
from fastapi import Depends
from sqlalchemy.orm import Session

from app.db import get_db
from app.db.store import RecordStore, SqlRecordStore


def get_record_store(db: Session = Depends(get_db)) -> RecordStore:
    """Record store bound to the request's database session."""
    return SqlRecordStore(db)


__all__ = ["get_db", "get_record_store"]
