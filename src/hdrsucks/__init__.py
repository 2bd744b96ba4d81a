"""hdr-sucks: HDR-preserving HEVC transcode orchestrator.

Drives ffprobe, ffmpeg, x265, dovi_tool, hdr10plus_tool and mkvmerge as
external processes so that HDR10, HDR10+ and Dolby Vision metadata survive a
re-encode.
"""

__version__ = "0.1.0"
