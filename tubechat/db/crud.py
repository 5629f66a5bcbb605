"""
CRUD operations for the tubechat database.
"""

from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session

from tubechat.db.models import Transcript


def transcript_exists(db: Session, video_id: str) -> bool:
    """Check if a transcript is stored for a video."""
    return db.get(Transcript, video_id) is not None


def get_transcript_segments(db: Session, video_id: str) -> Optional[List[Dict[str, Any]]]:
    """Get the stored segments of a video, or None if there are none."""
    transcript = db.get(Transcript, video_id)
    if transcript is None:
        return None
    return transcript.segments


def save_transcript(db: Session, video_id: str, segments: List[Dict[str, Any]]) -> Transcript:
    """Create or replace the transcript of a video."""
    transcript = db.get(Transcript, video_id)
    if transcript is None:
        transcript = Transcript(video_id=video_id, segments=segments)
        db.add(transcript)
    else:
        transcript.segments = segments
    db.commit()
    db.refresh(transcript)
    return transcript


def delete_transcript(db: Session, video_id: str) -> bool:
    """Delete the transcript of a video. Returns whether one existed."""
    transcript = db.get(Transcript, video_id)
    if transcript is None:
        return False
    db.delete(transcript)
    db.commit()
    return True
