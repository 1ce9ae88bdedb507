"""Type definitions for the scan pipeline.

This module provides:
- PageDescriptor: One scanned page and its keep/discard decision
- PageRecordStore: Append-only, scan-ordered page list
- ExitCode: Process exit status
- Compressor, Merger, Uploader: External step interfaces
"""

from .interfaces import Compressor, Merger, Uploader
from .page import PageDescriptor
from .status import ExitCode
from .store import PageRecordStore

__all__ = [
    # Core data models
    "PageDescriptor",
    "PageRecordStore",
    # Status
    "ExitCode",
    # Component interfaces
    "Compressor",
    "Merger",
    "Uploader",
]
