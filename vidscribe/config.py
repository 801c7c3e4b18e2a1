import math
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .errors import StartupConfigError


@dataclass(frozen=True)
class Settings:
    api_key: str
    model: str = "gemini-2.5-pro"
    video_path: Path = Path("./videos/video.mp4")
    remote_file_name: str = "ai-persuasion"
    display_name: str = "AI Persuasion"
    mime_type: str = "video/mp4"
    poll_interval: float = 5.0
    # 0 means poll until the file leaves PROCESSING
    poll_max_attempts: int = 360

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Builds settings from the environment, reading a .env file first.
        Raises StartupConfigError before any remote call is made.
        """
        load_dotenv()

        api_key = os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise StartupConfigError("Environment variable GEMINI_API_KEY is missing.")

        return cls(
            api_key=api_key,
            model=os.getenv("GEMINI_MODEL", cls.model),
            video_path=Path(os.getenv("VIDEO_PATH", str(cls.video_path))),
            remote_file_name=os.getenv("REMOTE_FILE_NAME", cls.remote_file_name),
            display_name=os.getenv("DISPLAY_NAME", cls.display_name),
            mime_type=os.getenv("VIDEO_MIME_TYPE", cls.mime_type),
            poll_interval=_number("POLL_INTERVAL", cls.poll_interval, float),
            poll_max_attempts=_number("POLL_MAX_ATTEMPTS", cls.poll_max_attempts, int),
        )


def _number(var: str, default, cast):
    raw = os.getenv(var)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise StartupConfigError(f"{var} must be a number, got {raw!r}.")
    if not math.isfinite(value):
        raise StartupConfigError(f"{var} must be a finite number, got {raw!r}.")
    if value < 0:
        raise StartupConfigError(f"{var} must not be negative, got {raw!r}.")
    return value
