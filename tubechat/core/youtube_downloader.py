"""
YouTube audio downloader module.
"""

from pathlib import Path

from pytubefix import YouTube
from pytubefix.exceptions import PytubeFixError

from tubechat.models.schemas import MediaInfo
from tubechat.utils.error_handling import AcquisitionError
from tubechat.utils.helpers import is_valid_video_id, watch_url
from tubechat.utils.logger import logging


class YouTubeDownloader:
    """Class to handle downloading the audio of YouTube videos."""

    def _open(self, video_id: str) -> YouTube:
        if not is_valid_video_id(video_id):
            raise AcquisitionError(video_id, "invalid video id")
        return YouTube(watch_url(video_id))

    def get_media_info(self, video_id: str) -> MediaInfo:
        """Extract metadata from a YouTube video."""
        try:
            yt = self._open(video_id)
            return MediaInfo(
                video_id=video_id,
                title=yt.title,
                author=yt.author,
                thumbnail=f"https://i.ytimg.com/vi/{video_id}/maxresdefault.jpg",
                length_seconds=yt.length,
            )
        except (PytubeFixError, OSError) as e:
            raise AcquisitionError(video_id, str(e)) from e

    def download_audio(self, video_id: str, output_dir: Path) -> Path:
        """
        Download the smallest audio-only stream of a video.

        Args:
            video_id: YouTube video id
            output_dir: Existing directory the file is written to

        Returns:
            Path to the downloaded audio file
        """
        try:
            yt = self._open(video_id)
            audio_stream = yt.streams.filter(only_audio=True).order_by('abr').first()
            if audio_stream is None:
                raise AcquisitionError(video_id, "no audio stream available")

            extension = audio_stream.subtype or "m4a"
            logging.info(f"Downloading audio for {video_id} ({audio_stream.abr}, {extension})")
            output_path = audio_stream.download(
                output_path=str(output_dir),
                filename=f"{video_id}.{extension}",
            )
        except (PytubeFixError, OSError) as e:
            logging.error(f"Error downloading audio for {video_id}: {str(e)}")
            raise AcquisitionError(video_id, str(e)) from e

        logging.info(f"Audio saved to: {output_path}")
        return Path(output_path)
