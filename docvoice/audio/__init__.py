"""Audio merge components for Docvoice."""

from .concatenator import AudioConcatenator, FfmpegConcatenator, resolve_ffmpeg

__all__ = ["AudioConcatenator", "FfmpegConcatenator", "resolve_ffmpeg"]
