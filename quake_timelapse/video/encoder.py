"""Video encoder: assembles persisted frames into one video with ffmpeg.

This stage only reads artifacts, so it can be re-run independently of
rendering.  Failures are reported to the operator and never touch frames.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from pathlib import Path

from quake_timelapse.store.frame_store import FrameStore

logger = logging.getLogger(__name__)

# One "key=value" pair per line, as written by ffmpeg -progress
_PROGRESS_LINE = re.compile(r"^(\w+)=(.*)$")


class EncodingFailure(Exception):
    """Raised when the video could not be produced."""

    def __init__(self, reason: str, stderr: str = "") -> None:
        self.reason = reason
        self.stderr = stderr
        super().__init__(f"Encoding failed: {reason}")


class VideoEncoder:
    """Thin wrapper around the ffmpeg command line.

    Args:
        fps: Output frame rate; frames are consumed in index order at this rate.
        ffmpeg_path: Explicit binary; falls back to ``ffmpeg`` on PATH.
    """

    def __init__(self, fps: int = 24, ffmpeg_path: str | None = None) -> None:
        if fps <= 0:
            raise ValueError("fps must be positive")
        self._fps = fps
        self._ffmpeg_path = ffmpeg_path

    def resolve_binary(self) -> str:
        binary = self._ffmpeg_path or shutil.which("ffmpeg")
        if not binary:
            raise EncodingFailure("ffmpeg not found; install it or set QUAKE_FFMPEG_PATH")
        return binary

    def build_command(self, binary: str, input_pattern: str, output: Path) -> list[str]:
        return [
            binary,
            "-y",
            "-framerate",
            str(self._fps),
            "-i",
            input_pattern,
            "-pix_fmt",
            "yuv420p",
            "-progress",
            "pipe:1",
            "-nostats",
            str(output),
        ]

    def encode(self, frames: FrameStore, output: Path) -> Path:
        """Encode every artifact in *frames* into *output*.

        ffmpeg's ``-progress`` report is read from its stdout while it runs
        and logged against the number of frames found.  Everything else it
        prints is kept and attached to the failure, if any.

        Raises:
            EncodingFailure: If there are no frames, ffmpeg is missing, or
                ffmpeg exits non-zero.
        """
        indices = frames.existing_indices()
        if not indices:
            raise EncodingFailure(f"no frames found in {frames.directory}")
        if indices[0] != 0:
            logger.warning("First frame is %d; ffmpeg expects the sequence to start at 0", indices[0])

        command = self.build_command(self.resolve_binary(), frames.input_pattern, output)
        total = len(indices)
        logger.info("Encoding %d frame(s) at %d fps into %s", total, self._fps, output)
        try:
            proc = subprocess.Popen(command, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True)
        except OSError as exc:
            raise EncodingFailure(str(exc)) from exc

        messages: list[str] = []
        frame = 0
        for line in proc.stdout:
            match = _PROGRESS_LINE.match(line.strip())
            if match is None:
                messages.append(line)
                continue
            key, value = match.groups()
            if key == "frame" and value.isdigit():
                frame = int(value)
            elif key == "progress":
                logger.info("Encoding progress: %.1f%% done (%d/%d frames)", 100.0 * frame / total, frame, total)
        returncode = proc.wait()
        output_text = "".join(messages)

        if returncode != 0:
            logger.error("ffmpeg exited with %d:\n%s", returncode, output_text)
            raise EncodingFailure(f"ffmpeg exited with code {returncode}", stderr=output_text)

        if output_text.strip():
            logger.debug("ffmpeg output:\n%s", output_text)
        logger.info("Wrote video to %s", output)
        return output
