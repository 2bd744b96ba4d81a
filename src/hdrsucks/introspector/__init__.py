"""Media introspection via ffprobe.

- MediaIntrospector: Protocol defining the introspection interface
- FFprobeIntrospector: Production implementation using ffprobe
- parse_ffprobe_output: Convert ffprobe JSON into a ProbeResult
- resolve_duration: Pick the best available duration for a stream
"""

from hdrsucks.introspector.ffprobe import FFprobeIntrospector
from hdrsucks.introspector.interface import MediaIntrospector
from hdrsucks.introspector.parsers import (
    parse_ffprobe_output,
    resolve_duration,
    validate_probe_result,
)

__all__ = [
    "FFprobeIntrospector",
    "MediaIntrospector",
    "parse_ffprobe_output",
    "resolve_duration",
    "validate_probe_result",
]
