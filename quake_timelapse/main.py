"""quake-timelapse: earthquake catalog to fading-marker frames to video.

This is the application entry point.  It wires the EventSource,
ingestion adapter, FrameCoordinator, Pillow renderer, and ffmpeg encoder
together behind three commands:

    fetch   download the catalog into the data file
    render  turn the data file into numbered frames (resumable)
    encode  assemble the frames into a video
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from quake_timelapse.adapters.ingest import ParseError, download_catalog, read_event_file
from quake_timelapse.adapters.usgs import SourceError, UsgsEventSource
from quake_timelapse.config import Settings, settings
from quake_timelapse.core.coordinator import FrameCoordinator, RunSummary
from quake_timelapse.core.projection import CoordinateMapper
from quake_timelapse.core.scheduler import WindowScheduler
from quake_timelapse.foundation.clock import as_utc
from quake_timelapse.render.surface import FrameRenderer, PillowSurface, load_background, load_font
from quake_timelapse.store.entity_tracker import EntityTracker
from quake_timelapse.store.frame_store import FrameStore, RenderFailure
from quake_timelapse.video.encoder import EncodingFailure, VideoEncoder

logger = logging.getLogger(__name__)

_LABEL_MARGIN = 30


# ── Wiring ───────────────────────────────────────────────────────────────────

def build_coordinator(cfg: Settings) -> FrameCoordinator:
    """Assemble a coordinator and its collaborators from *cfg*."""
    size = (cfg.screen_width, cfg.screen_height)
    surface = PillowSurface(
        load_background(cfg.background_image, size),
        font=load_font(cfg.label_font_size),
    )
    renderer = FrameRenderer(
        surface,
        circle_color=cfg.circle_color,
        label_color=cfg.label_color,
        label_position=(0, cfg.screen_height - _LABEL_MARGIN),
    )
    return FrameCoordinator(
        scheduler=WindowScheduler.from_range(cfg.start_date, cfg.end_date, cfg.total_frames),
        tracker=EntityTracker(duration=cfg.quake_duration, decay_rate=cfg.decay_rate),
        mapper=CoordinateMapper(cfg.screen_width, cfg.screen_height),
        renderer=renderer,
        frames=FrameStore(cfg.frames_dir, cfg.frame_extension),
        global_end=cfg.end_date,
        catch_up_gaps=cfg.catch_up_gaps,
    )


def run_fetch(cfg: Settings) -> int:
    source = UsgsEventSource(cfg.usgs_url, timeout=cfg.request_timeout_seconds)
    try:
        with open(cfg.data_file, "w", encoding="utf-8", newline="") as out:
            return download_catalog(
                source, out, cfg.fetch_start, cfg.resolved_fetch_end(), cfg.fetch_step_months
            )
    finally:
        source.close()


def run_render(cfg: Settings) -> RunSummary:
    coordinator = build_coordinator(cfg)
    logger.info(
        "Rendering %s into %s (window width %s)",
        cfg.data_file,
        cfg.frames_dir,
        cfg.window_width,
    )
    return coordinator.run(read_event_file(cfg.data_file, strict_ordering=cfg.strict_ordering))


def run_encode(cfg: Settings) -> Path:
    encoder = VideoEncoder(fps=cfg.frames_per_second, ffmpeg_path=cfg.ffmpeg_path)
    return encoder.encode(FrameStore(cfg.frames_dir, cfg.frame_extension), cfg.video_file)


# ── Command line ─────────────────────────────────────────────────────────────

def _timestamp(value: str) -> datetime:
    return as_utc(datetime.fromisoformat(value))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="quake-timelapse", description=__doc__.splitlines()[0])
    parser.add_argument("--log-level", help="Override QUAKE_LOG_LEVEL")
    parser.add_argument("--data-file", type=Path, help="Catalog CSV path")
    parser.add_argument("--frames-dir", type=Path, help="Directory for frame artifacts")
    sub = parser.add_subparsers(dest="command", required=True)

    p_fetch = sub.add_parser("fetch", help="Download the catalog from USGS")
    p_fetch.add_argument("--start", type=_timestamp, dest="fetch_start", help="First range start (ISO-8601)")
    p_fetch.add_argument("--end", type=_timestamp, dest="fetch_end", help="Stop after this instant (ISO-8601)")
    p_fetch.add_argument("--step-months", type=int, dest="fetch_step_months", help="Months per request")

    p_render = sub.add_parser("render", help="Render frames from the catalog (resumable)")
    p_render.add_argument("--start", type=_timestamp, dest="start_date", help="Global range start (ISO-8601)")
    p_render.add_argument("--end", type=_timestamp, dest="end_date", help="Global range end (ISO-8601)")
    p_render.add_argument("--background", type=Path, dest="background_image", help="Background image")
    p_render.add_argument("--duration", type=int, dest="quake_duration", help="Frames a marker stays visible")
    p_render.add_argument(
        "--catch-up-gaps",
        action="store_true",
        default=None,
        help="Emit one frame per empty window instead of advancing once per event",
    )

    p_encode = sub.add_parser("encode", help="Assemble frames into a video with ffmpeg")
    p_encode.add_argument("--output", type=Path, dest="video_file", help="Video file to write")
    p_encode.add_argument("--fps", type=int, dest="frames_per_second", help="Output frame rate")
    p_encode.add_argument("--ffmpeg", dest="ffmpeg_path", help="ffmpeg binary")

    return parser


def apply_overrides(base: Settings, args: argparse.Namespace) -> Settings:
    """Return a copy of *base* with every explicitly given flag applied."""
    updates = {
        key: value
        for key, value in vars(args).items()
        if key != "command" and value is not None and key in Settings.model_fields
    }
    return base.model_copy(update=updates)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = apply_overrides(settings, args)

    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )

    try:
        if args.command == "fetch":
            run_fetch(cfg)
        elif args.command == "render":
            summary = run_render(cfg)
            logger.info("Summary: %s", summary.to_dict())
        elif args.command == "encode":
            run_encode(cfg)
    except (ParseError, SourceError, RenderFailure, EncodingFailure, FileNotFoundError) as exc:
        logger.error("%s aborted: %s", args.command, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
