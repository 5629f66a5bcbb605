"""
Configuration settings for the tubechat application.
"""

import os
import shutil
from typing import Dict
from pathlib import Path
from dotenv import load_dotenv


# Ensure environment variables are loaded
load_dotenv()


class Config:
    """Base configuration class."""

    # Application info
    APP_NAME = "TubeChat"
    APP_VERSION = "0.2.0"

    # Data directories
    BASE_DIR = Path(__file__).resolve().parent.parent.absolute()
    DATA_DIR = Path(os.getenv("DATA_DIR", BASE_DIR / "data"))
    CACHE_DIR = Path(os.getenv("CACHE_DIR", DATA_DIR / "cache"))
    TEMP_DIR = Path(os.getenv("TEMP_DIR", DATA_DIR / "tmp"))

    # API keys
    GROQ_API_KEY = os.getenv("GROQ_API_KEY")

    # Default models
    TRANSCRIPTION_MODEL = os.getenv("TRANSCRIPTION_MODEL", "whisper-large-v3-turbo")
    CHAT_MODEL = os.getenv("CHAT_MODEL", "llama-3.3-70b-versatile")

    # Chunking limits. The speech-to-text endpoint rejects payloads above ~25MB.
    MAX_CHUNK_DURATION = int(os.getenv("MAX_CHUNK_DURATION", "600"))
    MAX_CHUNK_SIZE_MB = float(os.getenv("MAX_CHUNK_SIZE_MB", "24"))

    # Context selection
    MAX_CONTEXT_TOKENS = int(os.getenv("MAX_CONTEXT_TOKENS", "15000"))
    TOKENIZER_ENCODING = os.getenv("TOKENIZER_ENCODING", "cl100k_base")

    # Pipeline execution
    STAGE_TIMEOUT = float(os.getenv("STAGE_TIMEOUT", "900"))
    TRANSCRIPTION_CONCURRENCY = int(os.getenv("TRANSCRIPTION_CONCURRENCY", "3"))

    # Durable transcript store: file, redis or sql
    TRANSCRIPT_STORE = os.getenv("TRANSCRIPT_STORE", "file").lower()
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR}/tubechat.db")

    # External tools
    FFMPEG_BINARY = os.getenv("FFMPEG_BINARY_PATH", shutil.which("ffmpeg") or "ffmpeg")
    FFPROBE_BINARY = os.getenv("FFPROBE_BINARY_PATH", shutil.which("ffprobe") or "ffprobe")

    @classmethod
    def max_chunk_size_bytes(cls) -> int:
        return int(cls.MAX_CHUNK_SIZE_MB * 1024 * 1024)

    # Create data directories if they don't exist
    @classmethod
    def initialize(cls):
        """Initialize the application configuration."""
        cls.CACHE_DIR.mkdir(parents=True, exist_ok=True)
        cls.TEMP_DIR.mkdir(parents=True, exist_ok=True)

    @classmethod
    def get_paths(cls) -> Dict[str, Path]:
        """Get all application paths."""
        return {
            "base_dir": cls.BASE_DIR,
            "data_dir": cls.DATA_DIR,
            "cache_dir": cls.CACHE_DIR,
            "temp_dir": cls.TEMP_DIR,
        }


class DevelopmentConfig(Config):
    """Development configuration."""

    DEBUG = True
    LOG_LEVEL = "DEBUG"


class ProductionConfig(Config):
    """Production configuration."""

    DEBUG = False
    LOG_LEVEL = "INFO"


# Determine which configuration to use based on environment
def get_config():
    """Get the appropriate configuration based on environment."""
    env = os.getenv("ENVIRONMENT", "development").lower()
    if env == "production":
        return ProductionConfig
    else:
        return DevelopmentConfig


# Create a config instance
config = get_config()
config.initialize()
