"""First-occurrence scan of HDR side data.

Stream-level side data is scanned before first-frame side data. For each
kind only the first record found is kept, so stream-level mastering display
data wins over a frame-level copy.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from hdrsucks.domain.enums import SideDataKind
from hdrsucks.domain.models import SideDataRecord
from hdrsucks.encoder.translate import format_master_display, format_max_cll


@dataclass(frozen=True)
class HdrScan:
    """HDR side data found for the video stream."""

    mastering_display: SideDataRecord | None = None
    content_light_level: SideDataRecord | None = None
    dolby_vision: SideDataRecord | None = None
    hdr10_plus: SideDataRecord | None = None

    @property
    def has_dolby_vision(self) -> bool:
        return self.dolby_vision is not None

    @property
    def has_hdr10_plus(self) -> bool:
        return self.hdr10_plus is not None

    @property
    def needs_extraction(self) -> bool:
        return self.has_dolby_vision or self.has_hdr10_plus

    def encoder_args(self) -> list[str]:
        """Translate static HDR metadata into x265 tokens.

        Raises:
            MasteringDataError: If mastering display data is malformed.
        """
        args: list[str] = []
        if self.mastering_display is not None:
            args.extend(
                ["--master-display", format_master_display(self.mastering_display)]
            )
        if self.content_light_level is not None:
            args.extend(["--max-cll", format_max_cll(self.content_light_level)])
        return args


_KIND_FIELDS = {
    SideDataKind.MASTERING_DISPLAY: "mastering_display",
    SideDataKind.CONTENT_LIGHT_LEVEL: "content_light_level",
    SideDataKind.DOVI_CONFIG: "dolby_vision",
    SideDataKind.HDR10_PLUS: "hdr10_plus",
}


def scan_side_data(*collections: Iterable[SideDataRecord]) -> HdrScan:
    """Record the first occurrence of each HDR side data kind.

    Args:
        *collections: Side data lists in priority order, normally the
            stream's and then the first frame's.

    Returns:
        HdrScan with at most one record per kind.
    """
    found: dict[str, SideDataRecord] = {}
    for records in collections:
        for record in records:
            field_name = _KIND_FIELDS.get(record.kind)
            if field_name is not None and field_name not in found:
                found[field_name] = record
    return HdrScan(**found)
