"""
Media tool capability used by the transcription pipeline.

The pipeline only depends on the MediaTool interface; FFmpegMediaTool is the
production implementation backed by pytubefix, ffmpeg and ffprobe.
"""

import asyncio
import shutil
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from tubechat.config import config
from tubechat.core.youtube_downloader import YouTubeDownloader
from tubechat.models.schemas import EncodingProfile
from tubechat.utils.error_handling import MediaProcessingError, StageTimeoutError
from tubechat.utils.logger import logging


class MediaTool(ABC):
    """
    Contract for downloading and manipulating media files.
    Allows the pipeline to be exercised without network access or binaries.
    """

    @abstractmethod
    async def download(self, video_id: str, output_dir: Path) -> Path:
        """Download the source audio of a video into `output_dir`."""

    @abstractmethod
    async def extract_audio(self, source: Path, output_path: Path) -> Path:
        """Convert a downloaded media file to an mp3 audio file."""

    @abstractmethod
    async def probe_duration(self, path: Path) -> float:
        """Return the duration of a media file in seconds."""

    @abstractmethod
    async def split_chunk(
        self,
        source: Path,
        output_path: Path,
        start: float,
        duration: float,
        profile: EncodingProfile,
    ) -> Path:
        """Re-encode `duration` seconds of `source`, starting at `start`."""


class FFmpegMediaTool(MediaTool):
    """MediaTool backed by pytubefix downloads and ffmpeg/ffprobe subprocesses."""

    def __init__(
        self,
        downloader: Optional[YouTubeDownloader] = None,
        ffmpeg_binary: str = config.FFMPEG_BINARY,
        ffprobe_binary: str = config.FFPROBE_BINARY,
        timeout: float = config.STAGE_TIMEOUT,
    ):
        self.downloader = downloader or YouTubeDownloader()
        self.ffmpeg_binary = ffmpeg_binary
        self.ffprobe_binary = ffprobe_binary
        self.timeout = timeout

    async def _run(self, cmd: List[str], stage: str) -> str:
        """Run a subprocess, killing it if it outlives the stage timeout."""
        logging.debug(f"Running {stage}: {' '.join(cmd)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise MediaProcessingError(cmd[0], None, f"binary not found: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise StageTimeoutError(stage, self.timeout)
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise

        if process.returncode != 0:
            error_output = stderr.decode(errors="replace")
            logging.error(f"{stage} failed: {error_output}")
            raise MediaProcessingError(Path(cmd[0]).name, process.returncode, error_output)
        return stdout.decode(errors="replace")

    async def download(self, video_id: str, output_dir: Path) -> Path:
        """
        Download in a worker thread.

        The thread cannot be interrupted, so a download abandoned on timeout
        or cancellation removes `output_dir` itself once it returns.
        """
        abandoned = threading.Event()

        def fetch() -> Path:
            try:
                return self.downloader.download_audio(video_id, output_dir)
            finally:
                if abandoned.is_set():
                    logging.info(f"Discarding abandoned download of {video_id}")
                    shutil.rmtree(output_dir, ignore_errors=True)

        try:
            return await asyncio.wait_for(asyncio.to_thread(fetch), timeout=self.timeout)
        except asyncio.TimeoutError:
            abandoned.set()
            raise StageTimeoutError("download", self.timeout)
        except asyncio.CancelledError:
            abandoned.set()
            raise

    async def extract_audio(self, source: Path, output_path: Path) -> Path:
        await self._run(
            [
                self.ffmpeg_binary,
                "-y",
                "-i", str(source),
                "-vn",
                "-map", "a",
                "-acodec", "libmp3lame",
                "-q:a", "0",
                "-f", "mp3",
                str(output_path),
            ],
            stage="extract_audio",
        )
        return output_path

    async def probe_duration(self, path: Path) -> float:
        output = await self._run(
            [
                self.ffprobe_binary,
                "-v", "error",
                "-show_entries", "format=duration",
                "-of", "default=noprint_wrappers=1:nokey=1",
                str(path),
            ],
            stage="probe_duration",
        )
        try:
            return float(output.strip())
        except ValueError:
            raise MediaProcessingError("ffprobe", 0, f"unexpected duration output: {output!r}")

    async def split_chunk(
        self,
        source: Path,
        output_path: Path,
        start: float,
        duration: float,
        profile: EncodingProfile,
    ) -> Path:
        await self._run(
            [
                self.ffmpeg_binary,
                "-y",
                "-ss", f"{start:.3f}",
                "-t", f"{duration:.3f}",
                "-i", str(source),
                "-vn",
                "-ac", str(profile.channels),
                "-ar", str(profile.sample_rate),
                "-b:a", f"{profile.bitrate_kbps}k",
                "-acodec", "libmp3lame",
                str(output_path),
            ],
            stage="split_chunk",
        )
        return output_path
