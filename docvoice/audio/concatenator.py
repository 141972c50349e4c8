"""Lossless audio concatenation through ffmpeg.

Responsibilities:
- Define the `AudioConcatenator` capability used by the merge stage.
- Join two audio files with the ffmpeg concat demuxer and stream copy.
"""

from __future__ import annotations

import os
from pathlib import Path
import shutil
import subprocess
from typing import Protocol

from ..errors import ArtifactIOError, ExternalToolError
from ..parsing import normalize_optional_string

FFMPEG_ENV_KEY = "DOCVOICE_FFMPEG"


class AudioConcatenator(Protocol):
    """Protocol for joining two audio files into one."""

    def concat(self, first: Path, second: Path, output_path: Path) -> None:
        """Write `first` followed by `second` to `output_path`."""


def resolve_ffmpeg(env: dict[str, str] | None = None) -> str:
    """Resolve the ffmpeg executable.

    Resolution order:
    1. `DOCVOICE_FFMPEG` environment override.
    2. System `PATH`.
    3. Bare `ffmpeg` (letting subprocess raise a missing-binary error).
    """

    env_map = os.environ if env is None else env
    override = normalize_optional_string(env_map.get(FFMPEG_ENV_KEY))
    if override is not None:
        return override
    return shutil.which("ffmpeg") or "ffmpeg"


class FfmpegConcatenator:
    """Concatenate audio with `ffmpeg -f concat -c copy` (no re-encoding)."""

    def __init__(self, executable: str | None = None) -> None:
        self.executable = executable if executable is not None else resolve_ffmpeg()

    def concat(self, first: Path, second: Path, output_path: Path) -> None:
        """Merge two audio files into `output_path`."""

        list_path = output_path.with_name(f"{output_path.stem}.concat.txt")
        partial_path = output_path.with_name(f"{output_path.stem}.partial{output_path.suffix}")
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            list_path.write_text(
                "".join(
                    f"file '{self._escape_concat_path(path.resolve())}'\n"
                    for path in (first, second)
                ),
                encoding="utf-8",
            )
        except OSError as exc:
            raise ArtifactIOError(
                f"Failed to write concat list `{list_path}`: {exc}", stage="merge"
            ) from exc

        command = [
            self.executable,
            "-y",
            "-hide_banner",
            "-loglevel",
            "error",
            "-f",
            "concat",
            "-safe",
            "0",
            "-i",
            str(list_path),
            "-c",
            "copy",
            str(partial_path),
        ]
        try:
            subprocess.run(command, check=True, capture_output=True, text=True)
            os.replace(partial_path, output_path)
        except FileNotFoundError as exc:
            raise ExternalToolError(
                f"Audio tool `{self.executable}` is not available.",
                hint=f"Install ffmpeg or point `{FFMPEG_ENV_KEY}` at the binary.",
            ) from exc
        except subprocess.CalledProcessError as exc:
            stderr = normalize_optional_string(exc.stderr) or "no stderr output"
            raise ExternalToolError(
                f"ffmpeg failed to merge `{output_path.name}` (exit {exc.returncode}): {stderr}",
                returncode=exc.returncode,
            ) from exc
        except OSError as exc:
            raise ArtifactIOError(
                f"Failed to move merged audio into `{output_path}`: {exc}", stage="merge"
            ) from exc
        finally:
            list_path.unlink(missing_ok=True)
            partial_path.unlink(missing_ok=True)

    @staticmethod
    def _escape_concat_path(path: Path) -> str:
        """Escape one file path for the ffmpeg concat list format."""

        return str(path).replace("'", "'\\''")
