"""
Command line entry point for tubechat.
"""

import argparse
import asyncio
from typing import Optional

from dotenv import load_dotenv

from tubechat.core.chat.handler import ChatAnswerer
from tubechat.core.summarizer import SocialContentGenerator
from tubechat.core.transcript_service import get_default_service
from tubechat.models.schemas import AnswerResult, SocialContentType
from tubechat.utils.helpers import extract_video_id, format_timestamp
from tubechat.utils.logger import logging


async def chat_with_youtube_video(
    url: str,
    question: Optional[str] = None,
    social: Optional[str] = None,
) -> Optional[str]:
    """
    Transcribe a YouTube video, then optionally answer a question about it.

    Args:
        url: YouTube video URL or id
        question: Optional question about the video
        social: Optional social content type (twitter, thread, summary)

    Returns:
        The text to print, or None if only transcription was requested
    """
    video_id = extract_video_id(url)
    if not video_id:
        raise ValueError(f"Not a YouTube URL or video id: {url}")

    service = get_default_service()
    logging.info(f"Fetching transcript for {video_id}")
    transcript = await service.get_transcript(video_id)
    logging.info(f"Transcript ready: {len(transcript)} segments")

    if social:
        return await SocialContentGenerator().generate(SocialContentType(social), transcript)

    if question:
        result = await ChatAnswerer().answer(question, transcript)
        return render_answer(result)

    return "\n".join(
        f"[{format_timestamp(segment.start)}] {segment.text}" for segment in transcript
    )


def render_answer(result: AnswerResult) -> str:
    lines = [result.text]
    if result.timestamps:
        lines.append("")
        for timestamp in result.timestamps:
            lines.append(f"  {format_timestamp(timestamp.seconds)}  {timestamp.label or ''}".rstrip())
    return "\n".join(lines)


def main():
    """Main function to run the application from command line."""
    parser = argparse.ArgumentParser(description="Chat with a YouTube video")
    parser.add_argument("url", help="YouTube video URL or id")
    parser.add_argument("--question", "-q", help="Question to ask about the video")
    parser.add_argument("--social", choices=[t.value for t in SocialContentType],
                        help="Generate social media content instead of answering")

    args = parser.parse_args()

    # Load environment variables
    load_dotenv()

    output = asyncio.run(chat_with_youtube_video(args.url, args.question, args.social))

    print("\n" + "=" * 80)
    print(output)
    print("=" * 80)


if __name__ == "__main__":
    main()
