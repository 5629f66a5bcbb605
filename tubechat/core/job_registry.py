"""
Registry of in-flight transcription jobs, keyed by video id.
"""

import asyncio
import weakref
from dataclasses import dataclass
from typing import Dict, List, Optional

from tubechat.models.schemas import TranscriptSegment
from tubechat.utils.logger import logging


@dataclass
class TranscriptionJob:
    """The single in-flight pipeline run for one video."""
    video_id: str
    task: "asyncio.Task[List[TranscriptSegment]]"
    progress: float = 0.0


class JobRegistry:
    """
    Tracks at most one running job per video id.

    Callers that must check and mutate the registry atomically for a key
    hold `lock(video_id)` while doing so. Different keys never contend.
    """

    def __init__(self):
        self._jobs: Dict[str, TranscriptionJob] = {}
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def lock(self, video_id: str) -> asyncio.Lock:
        """Return the lock guarding `video_id`, creating it on first use."""
        lock = self._locks.get(video_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[video_id] = lock
        return lock

    def get(self, video_id: str) -> Optional[TranscriptionJob]:
        return self._jobs.get(video_id)

    def is_running(self, video_id: str) -> bool:
        return video_id in self._jobs

    def register(self, video_id: str, task: "asyncio.Task[List[TranscriptSegment]]") -> TranscriptionJob:
        if video_id in self._jobs:
            raise RuntimeError(f"A transcription job for {video_id} is already registered")
        job = TranscriptionJob(video_id=video_id, task=task)
        self._jobs[video_id] = job
        task.add_done_callback(lambda done: self._finished(video_id, done))
        return job

    def remove(self, video_id: str) -> None:
        self._jobs.pop(video_id, None)

    def set_progress(self, video_id: str, progress: float) -> None:
        job = self._jobs.get(video_id)
        if job is not None:
            job.progress = progress

    def progress(self, video_id: str) -> Optional[float]:
        job = self._jobs.get(video_id)
        return job.progress if job is not None else None

    def _finished(self, video_id: str, task: asyncio.Task) -> None:
        # Covers tasks cancelled before their first step, which never reach
        # their own cleanup code.
        job = self._jobs.get(video_id)
        if job is not None and job.task is task:
            self.remove(video_id)

        # Retrieving the exception also keeps background failures from being
        # reported as "never retrieved".
        if task.cancelled():
            logging.info(f"Transcription task {task.get_name()} was cancelled")
            return
        error = task.exception()
        if error is not None:
            logging.error(f"Transcription task {task.get_name()} failed: {error}")
