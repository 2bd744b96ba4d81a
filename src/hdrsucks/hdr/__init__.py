"""HDR metadata detection, extraction and injection."""

from hdrsucks.hdr.sidechannel import HdrSideChannel
from hdrsucks.hdr.sidedata import HdrScan, scan_side_data

__all__ = ["HdrScan", "HdrSideChannel", "scan_side_data"]
