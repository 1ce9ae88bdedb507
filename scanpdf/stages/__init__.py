"""External pipeline steps.

Each step wraps one external program behind the BaseStage interface:
- CompressStage: ``gm convert`` (raw page -> page PDF)
- MergeStage: ``pdfunite`` (page PDFs -> document)
- UploadStage: ``rsync`` over ssh (document -> remote inbox)
"""

from .base import BaseStage, run_command
from .compress_stage import CompressStage
from .merge_stage import MergeStage
from .upload_stage import UploadStage

__all__ = [
    "BaseStage",
    "run_command",
    "CompressStage",
    "MergeStage",
    "UploadStage",
]
