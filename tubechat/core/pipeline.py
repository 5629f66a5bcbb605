"""
End-to-end transcription pipeline for a single video.
"""

import asyncio
import tempfile
from pathlib import Path
from typing import List, Optional

from tubechat.config import config
from tubechat.core.assembler import ProgressTracker, TranscriptAssembler
from tubechat.core.chunker import AudioChunker
from tubechat.core.media_tool import MediaTool
from tubechat.core.transcriber import TranscriptionClient
from tubechat.models.schemas import AudioChunk, ChunkTranscript, TranscriptSegment
from tubechat.utils.error_handling import StageTimeoutError, log_diagnostic_info
from tubechat.utils.logger import logging


class TranscriptionPipeline:
    """
    Runs download, extraction, chunking, transcription and assembly.

    Every intermediate file lives in a scratch directory that is removed when
    the run ends, whether it succeeds, fails, times out or is cancelled.
    """

    def __init__(
        self,
        media_tool: MediaTool,
        transcriber: TranscriptionClient,
        max_chunk_duration: int = config.MAX_CHUNK_DURATION,
        max_chunk_size: Optional[int] = None,
        temp_dir: Path = config.TEMP_DIR,
        concurrency: int = config.TRANSCRIPTION_CONCURRENCY,
        timeout: float = config.STAGE_TIMEOUT,
    ):
        self.media_tool = media_tool
        self.transcriber = transcriber
        self.chunker = AudioChunker(media_tool, max_chunk_duration, max_chunk_size)
        self.assembler = TranscriptAssembler(max_chunk_duration)
        self.temp_dir = Path(temp_dir)
        self.concurrency = max(1, concurrency)
        self.timeout = timeout

    async def run(self, video_id: str, tracker: Optional[ProgressTracker] = None) -> List[TranscriptSegment]:
        """
        Produce the full transcript of a video.

        Args:
            video_id: YouTube video id
            tracker: Receives progress updates as stages complete

        Returns:
            Time-aligned transcript sorted by start time
        """
        tracker = tracker or ProgressTracker()
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        stage = "download"

        with tempfile.TemporaryDirectory(
            prefix=f"{video_id}-", dir=self.temp_dir, ignore_cleanup_errors=True
        ) as scratch:
            work_dir = Path(scratch)
            try:
                source = await self.media_tool.download(video_id, work_dir)
                tracker.acquired()

                stage = "extract_audio"
                audio_path = await self.media_tool.extract_audio(source, work_dir / f"{video_id}.mp3")
                duration = await self.media_tool.probe_duration(audio_path)
                tracker.extracted()
                logging.info(f"Audio for {video_id} is {duration:.1f}s long")

                stage = "chunk"
                chunk_dir = work_dir / "chunks"
                chunk_dir.mkdir()
                chunks = await self.chunker.chunk(audio_path, duration, chunk_dir)

                stage = "transcribe"
                tracker.start_chunks(len(chunks))
                results = await self._transcribe_chunks(chunks, tracker)

                stage = "assemble"
                tracker.finalizing()
                transcript = self.assembler.assemble(results)
            except Exception as e:
                logging.error(f"Transcription of {video_id} failed during {stage}: {e}")
                log_diagnostic_info({"video_id": video_id, "stage": stage, "error": repr(e)})
                raise

        logging.info(f"Transcribed {video_id}: {len(transcript)} segments from {len(chunks)} chunk(s)")
        return transcript

    async def _transcribe_chunks(
        self, chunks: List[AudioChunk], tracker: ProgressTracker
    ) -> List[ChunkTranscript]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def transcribe_one(chunk: AudioChunk) -> ChunkTranscript:
            async with semaphore:
                try:
                    segments = await asyncio.wait_for(
                        self.transcriber.transcribe(chunk.path), timeout=self.timeout
                    )
                except asyncio.TimeoutError:
                    raise StageTimeoutError("transcribe", self.timeout)
            tracker.chunk_done()
            return ChunkTranscript(index=chunk.index, segments=segments)

        tasks = [asyncio.ensure_future(transcribe_one(chunk)) for chunk in chunks]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
