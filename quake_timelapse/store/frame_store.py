"""Persisted frame artifacts on the local filesystem.

Artifacts are named ``frame-NNNNNN.<ext>`` with a zero-padded, zero-based
frame index.  The existence of that exact path is the only marker of a
completed frame, so writes go to a temporary sibling first and are moved
into place atomically.  A failed write never leaves a file at the target.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

FRAME_PREFIX = "frame-"
INDEX_DIGITS = 6


class RenderFailure(Exception):
    """Raised when a frame cannot be drawn, encoded, or persisted."""

    def __init__(self, frame_index: int, reason: str) -> None:
        self.frame_index = frame_index
        self.reason = reason
        super().__init__(f"Frame {frame_index} failed: {reason}")


class FrameStore:
    """Directory of numbered frame artifacts.

    Args:
        directory: Where artifacts live.  Created on first write.
        extension: File extension without the leading dot.
    """

    def __init__(self, directory: Path | str, extension: str = "png") -> None:
        self._directory = Path(directory)
        self._extension = extension.lstrip(".")

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def input_pattern(self) -> str:
        """printf-style pattern matching every artifact, for the video encoder."""
        return str(self._directory / f"{FRAME_PREFIX}%0{INDEX_DIGITS}d.{self._extension}")

    def name_for(self, frame_index: int) -> str:
        return f"{FRAME_PREFIX}{frame_index:0{INDEX_DIGITS}d}.{self._extension}"

    def path_for(self, frame_index: int) -> Path:
        return self._directory / self.name_for(frame_index)

    def exists(self, frame_index: int) -> bool:
        return self.path_for(frame_index).exists()

    def write(self, frame_index: int, data: bytes) -> Path:
        """Persist *data* as the artifact for *frame_index*.

        Raises:
            RenderFailure: If the bytes could not be written; the target
                path is left untouched.
        """
        target = self.path_for(frame_index)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}.", suffix=".tmp", dir=self._directory
            )
        except OSError as exc:
            raise RenderFailure(frame_index, f"cannot prepare {target}: {exc}") from exc

        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, target)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise RenderFailure(frame_index, f"cannot write {target}: {exc}") from exc

        logger.debug("Persisted %s (%d bytes)", target, len(data))
        return target

    def existing_indices(self) -> list[int]:
        """Sorted indices of every completed artifact in the directory."""
        if not self._directory.is_dir():
            return []
        indices: list[int] = []
        for path in self._directory.glob(f"{FRAME_PREFIX}*.{self._extension}"):
            digits = path.stem[len(FRAME_PREFIX):]
            if len(digits) == INDEX_DIGITS and digits.isdigit():
                indices.append(int(digits))
        return sorted(indices)
