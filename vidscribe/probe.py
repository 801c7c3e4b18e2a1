import ffmpeg
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import UploadError


@dataclass
class VideoInfo:
    path: Path
    duration: Optional[float]
    width: Optional[int]
    height: Optional[int]
    has_audio: bool

    def describe(self) -> str:
        parts = []
        if self.duration is not None:
            minutes, seconds = divmod(int(round(self.duration)), 60)
            parts.append(f"{minutes}:{seconds:02d}")
        if self.width and self.height:
            parts.append(f"{self.width}x{self.height}")
        parts.append("audio" if self.has_audio else "no audio")
        return ", ".join(parts)


def probe_video(video_path: Path) -> Optional[VideoInfo]:
    """
    Inspects the local video before it is uploaded.
    Raises UploadError if the file is missing or has no video stream.
    Returns None when ffmpeg itself cannot probe the file, so the upload can still go ahead.
    """
    video_path = Path(video_path)
    if not video_path.is_file():
        raise UploadError(f"Video file not found: {video_path}")

    try:
        probe = ffmpeg.probe(str(video_path))
    except ffmpeg.Error as e:
        stderr = e.stderr.decode("utf8") if e.stderr else str(e)
        print(f"Warning: could not probe {video_path}: {stderr}")
        return None
    except FileNotFoundError:
        # ffprobe binary is not installed
        print(f"Warning: ffprobe not available, skipping probe of {video_path}")
        return None

    streams = probe.get("streams", [])
    video_stream = next((s for s in streams if s.get("codec_type") == "video"), None)
    audio_stream = next((s for s in streams if s.get("codec_type") == "audio"), None)

    if not video_stream:
        raise UploadError(f"{video_path} has no video stream.")

    duration = probe.get("format", {}).get("duration") or video_stream.get("duration")

    return VideoInfo(
        path=video_path,
        duration=float(duration) if duration is not None else None,
        width=video_stream.get("width"),
        height=video_stream.get("height"),
        has_audio=audio_stream is not None,
    )
