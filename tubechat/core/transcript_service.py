"""
Transcript cache and single-flight coordinator.

A video id is in exactly one of three states: absent, in progress (one
registered pipeline task) or cached (a durable store entry). Concurrent
requests for an in-progress id share the outcome of its single task.
"""

import asyncio
from typing import List, Optional, Tuple

from tubechat.core.assembler import ProgressTracker
from tubechat.core.job_registry import JobRegistry
from tubechat.core.media_tool import FFmpegMediaTool
from tubechat.core.pipeline import TranscriptionPipeline
from tubechat.core.transcriber import TranscriptionClient
from tubechat.models.schemas import JobStatus, TranscriptionStatus, TranscriptSegment
from tubechat.utils.caching import TranscriptStore, get_transcript_store
from tubechat.utils.error_handling import CacheWriteError, TranscriptionCancelledError
from tubechat.utils.logger import logging

STARTED = "started"


class TranscriptService:
    """Public entry point for obtaining transcripts."""

    def __init__(
        self,
        store: TranscriptStore,
        pipeline: TranscriptionPipeline,
        registry: Optional[JobRegistry] = None,
    ):
        self.store = store
        self.pipeline = pipeline
        self.registry = registry or JobRegistry()

    async def get_transcript(self, video_id: str) -> List[TranscriptSegment]:
        """
        Get or create the transcript of a video.

        Args:
            video_id: YouTube video id

        Returns:
            Transcript segments sorted by start time
        """
        cached, task = await self._cached_or_task(video_id)
        if cached is not None:
            logging.info(f"Using cached transcript for {video_id}")
            return cached
        # A waiter giving up must not cancel the run other waiters share.
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                raise TranscriptionCancelledError(video_id) from None
            raise

    async def start_transcription(self, video_id: str) -> str:
        """
        Start transcribing a video in the background.

        Returns:
            "completed" if already cached, "in_progress" if a run is active,
            otherwise "started"
        """
        async with self.registry.lock(video_id):
            if self.registry.is_running(video_id):
                return JobStatus.IN_PROGRESS.value
            if await asyncio.to_thread(self.store.exists, video_id):
                return JobStatus.COMPLETED.value
            self._launch(video_id)
        return STARTED

    async def get_cached_transcript(self, video_id: str) -> Optional[List[TranscriptSegment]]:
        """Return the stored transcript without ever starting a pipeline."""
        if self.registry.is_running(video_id):
            return None
        return await asyncio.to_thread(self.store.get, video_id)

    async def is_transcript_cached(self, video_id: str) -> bool:
        # A transcript still being finalized counts as in progress.
        if self.registry.is_running(video_id):
            return False
        return await asyncio.to_thread(self.store.exists, video_id)

    def is_transcription_in_progress(self, video_id: str) -> bool:
        return self.registry.is_running(video_id)

    def get_transcription_progress(self, video_id: str) -> Optional[float]:
        return self.registry.progress(video_id)

    async def get_transcription_status(self, video_id: str) -> TranscriptionStatus:
        progress = self.registry.progress(video_id)
        if progress is not None:
            return TranscriptionStatus(video_id=video_id, status=JobStatus.IN_PROGRESS, progress=progress)
        if await asyncio.to_thread(self.store.exists, video_id):
            return TranscriptionStatus(video_id=video_id, status=JobStatus.COMPLETED, progress=100.0)
        return TranscriptionStatus(video_id=video_id, status=JobStatus.NOT_STARTED, progress=0.0)

    def cancel_transcription(self, video_id: str) -> bool:
        """
        Cancel the in-flight run of a video for every waiter at once.

        Returns:
            Whether a run was cancelled
        """
        job = self.registry.get(video_id)
        if job is None:
            return False
        logging.info(f"Cancelling transcription for {video_id}")
        return job.task.cancel()

    async def _cached_or_task(
        self, video_id: str
    ) -> Tuple[Optional[List[TranscriptSegment]], Optional[asyncio.Task]]:
        async with self.registry.lock(video_id):
            job = self.registry.get(video_id)
            if job is not None:
                logging.info(f"Transcription for {video_id} already in progress, waiting...")
                return None, job.task

            cached = await asyncio.to_thread(self.store.get, video_id)
            if cached is not None:
                return cached, None

            return None, self._launch(video_id)

    def _launch(self, video_id: str) -> asyncio.Task:
        # Caller holds the registry lock for video_id.
        logging.info(f"Starting new transcription for {video_id}")
        task = asyncio.create_task(self._run(video_id), name=f"transcribe:{video_id}")
        self.registry.register(video_id, task)
        return task

    async def _run(self, video_id: str) -> List[TranscriptSegment]:
        tracker = ProgressTracker(lambda progress: self.registry.set_progress(video_id, progress))
        try:
            transcript = await self.pipeline.run(video_id, tracker)
            async with self.registry.lock(video_id):
                try:
                    await asyncio.to_thread(self.store.put, video_id, transcript)
                except CacheWriteError as e:
                    logging.warning(f"{e}. The transcript will be recomputed next time.")
                tracker.complete()
                self.registry.remove(video_id)
            return transcript
        finally:
            self.registry.remove(video_id)


_default_service: Optional[TranscriptService] = None


def get_default_service() -> TranscriptService:
    """Build the process-wide service from configuration on first use."""
    global _default_service
    if _default_service is None:
        pipeline = TranscriptionPipeline(FFmpegMediaTool(), TranscriptionClient())
        _default_service = TranscriptService(get_transcript_store(), pipeline)
    return _default_service
