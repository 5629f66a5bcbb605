"""
TubeChat: chat with YouTube videos.

Downloads and transcribes video audio, answers questions grounded in the
transcript with timestamps, and generates social media summaries.
"""

from tubechat.config import config

__version__ = config.APP_VERSION
