"""antimoji — fast, concurrent emoji detection and removal for source trees."""

from .types import (
    DetectionResult, EmojiCategory, EmojiMatch, PatternSet, ProcessingConfig,
    ProcessResult, UnicodeRange,
)
from .patterns import default_patterns, filter_patterns
from .detector import detect
from .allowlist import Allowlist, apply_allowlist, default_allowlist, merge, normalize
from .pool import Job, JobResult, PoolStateError, WorkerPool, run_pool
from .fs import FileTooLargeError
from .modifier import ModifyConfig, ModifyResult, atomic_write_file, create_backup, modify_file, remove_emojis
from .processor import Pipeline, clean_files, process_file, scan_files

__all__ = [
    "DetectionResult", "EmojiCategory", "EmojiMatch", "PatternSet",
    "ProcessingConfig", "ProcessResult", "UnicodeRange",
    "default_patterns", "filter_patterns",
    "detect",
    "Allowlist", "apply_allowlist", "default_allowlist", "merge", "normalize",
    "Job", "JobResult", "PoolStateError", "WorkerPool", "run_pool",
    "FileTooLargeError",
    "ModifyConfig", "ModifyResult", "atomic_write_file", "create_backup",
    "modify_file", "remove_emojis",
    "Pipeline", "clean_files", "process_file", "scan_files",
]
__version__ = "0.1.0"
