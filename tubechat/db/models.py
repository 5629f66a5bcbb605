"""
SQLAlchemy models for tubechat.
"""

import datetime
from sqlalchemy import Column, String, DateTime, JSON

from tubechat.db.database import Base


def utc_now():
    return datetime.datetime.now(datetime.timezone.utc)


class Transcript(Base):
    """A completed transcript, stored as a JSON array of segments."""
    __tablename__ = "transcripts"

    video_id = Column(String(20), primary_key=True)
    segments = Column(JSON, nullable=False)  # [{text, start, end}, ...]
    created_at = Column(DateTime(timezone=True), default=utc_now)

    def __repr__(self):
        return f"<Transcript(video_id='{self.video_id}', segments={len(self.segments or [])})>"
