"""Application configuration loaded from environment variables."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

from quake_timelapse.foundation.clock import as_utc, utc_now


class Settings(BaseSettings):
    app_name: str = "quake-timelapse"
    log_level: str = "INFO"

    # Canvas
    screen_width: int = 1920
    screen_height: int = 1080
    background_image: Path | None = Path("background.png")
    circle_color: tuple[int, int, int] = (255, 0, 0)
    label_color: tuple[int, int, int] = (255, 0, 0)
    label_font_size: int = 30

    # Timeline
    video_duration_seconds: int = 3600
    frames_per_second: int = 24
    quake_duration: int = 12
    start_date: datetime = datetime.fromisoformat("1980-01-01T06:17:45.250+00:00")
    end_date: datetime = datetime.fromisoformat("2018-02-09T22:01:49.307+00:00")
    catch_up_gaps: bool = False
    strict_ordering: bool = True

    # Artifacts
    data_file: Path = Path("data.csv")
    frames_dir: Path = Path("frames")
    frame_extension: str = "png"
    video_file: Path = Path("video.mp4")
    ffmpeg_path: str | None = None

    # Catalog download
    usgs_url: str = "https://earthquake.usgs.gov/fdsnws/event/1/query"
    fetch_start: datetime = datetime.fromisoformat("1980-01-01T00:00:00+00:00")
    fetch_end: datetime | None = None
    fetch_step_months: int = 1
    request_timeout_seconds: float = 60.0

    model_config = {"env_prefix": "QUAKE_"}

    @field_validator("start_date", "end_date", "fetch_start", "fetch_end")
    @classmethod
    def dates_must_be_aware(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else None

    # ── Derived values ───────────────────────────────────────────────────

    @property
    def total_frames(self) -> int:
        return self.video_duration_seconds * self.frames_per_second

    @property
    def decay_rate(self) -> float:
        return 1.0 / self.quake_duration

    @property
    def window_width(self) -> timedelta:
        return (self.end_date - self.start_date) / self.total_frames

    def resolved_fetch_end(self) -> datetime:
        return self.fetch_end if self.fetch_end is not None else utc_now()


settings = Settings()
