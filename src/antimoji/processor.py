"""Processing pipeline — scan or clean many files through the worker pool.

Usage:
    pipeline = Pipeline(default_patterns(), workers=0)      # 0 = one per CPU

    for r in pipeline.scan(["a.md", "b.py"]):
        print(r.file_path, r.detection.total_count)

    results = pipeline.clean(paths, ModifyConfig(create_backup=True), allowlist)

Results come back in completion order, one per input path.  Per-file
failures are reported on the result, never raised.
"""

from __future__ import annotations
import logging
import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .allowlist import Allowlist
from .detector import detect
from .fs import check_size, is_text_file, read_file
from .modifier import ModifyConfig, ModifyResult, modify_file
from .patterns import default_patterns, filter_patterns
from .pool import resolve_worker_count, run_pool, run_sequential
from .types import DetectionResult, PatternSet, ProcessingConfig, ProcessResult

logger = logging.getLogger(__name__)


def process_file(
    file_path: str | Path,
    patterns: PatternSet,
    config: ProcessingConfig | None = None,
) -> ProcessResult:
    """Scan a single file.  Does not modify it."""
    config = config or ProcessingConfig()
    started = time.perf_counter()
    path = str(file_path)
    result = ProcessResult(file_path=path)

    try:
        size = check_size(path, config.max_file_size)
    except OSError as exc:
        logger.debug("skipping %s: %s", path, exc)
        result.error = exc
        return result

    try:
        is_text = is_text_file(path)
    except OSError as exc:
        # unreadable files are skipped like binary ones
        logger.debug("cannot sample %s for text detection: %s", path, exc)
        is_text = False

    if not is_text:
        # not an error, just nothing to scan
        result.detection = DetectionResult(
            processed_bytes=size,
            duration=time.perf_counter() - started,
            success=False,
        )
        return result

    try:
        content = read_file(path)
    except OSError as exc:
        result.error = exc
        return result

    detection = detect(content, filter_patterns(patterns, config))
    detection.duration = time.perf_counter() - started
    result.detection = detection
    return result


@dataclass
class Pipeline:
    """Runs scans and cleans over file lists, concurrently when worthwhile."""

    patterns: PatternSet = field(default_factory=default_patterns)
    config: ProcessingConfig = field(default_factory=ProcessingConfig)
    workers: int = 0                            # 0 = auto
    cancel: threading.Event | None = None

    def scan(self, file_paths: Sequence[str | Path]) -> list[ProcessResult]:
        """Detect emojis in every file."""
        paths = [str(p) for p in file_paths]
        if len(paths) <= 1:
            return run_sequential(paths, self._scan_one, on_error=_scan_error)
        return run_pool(
            paths,
            self._scan_one,
            workers=self.workers,
            on_error=_scan_error,
            cancel=self.cancel,
        )

    def clean(
        self,
        file_paths: Sequence[str | Path],
        config: ModifyConfig | None = None,
        allowlist: Allowlist | None = None,
    ) -> list[ModifyResult]:
        """Remove emojis from every file according to ``config``."""
        modify_config = config or ModifyConfig()
        paths = [str(p) for p in file_paths]

        def clean_one(path: str) -> ModifyResult:
            return modify_file(path, self.patterns, modify_config, allowlist)

        if len(paths) <= 1:
            return run_sequential(paths, clean_one, on_error=_modify_error)
        return run_pool(
            paths,
            clean_one,
            workers=self.workers,
            on_error=_modify_error,
            cancel=self.cancel,
        )

    @property
    def worker_count(self) -> int:
        return resolve_worker_count(self.workers)

    def _scan_one(self, path: str) -> ProcessResult:
        return process_file(path, self.patterns, self.config)


def scan_files(
    file_paths: Sequence[str | Path],
    patterns: PatternSet | None = None,
    config: ProcessingConfig | None = None,
    workers: int = 0,
) -> list[ProcessResult]:
    return Pipeline(
        patterns=patterns or default_patterns(),
        config=config or ProcessingConfig(),
        workers=workers,
    ).scan(file_paths)


def clean_files(
    file_paths: Sequence[str | Path],
    patterns: PatternSet | None = None,
    config: ModifyConfig | None = None,
    allowlist: Allowlist | None = None,
    workers: int = 0,
) -> list[ModifyResult]:
    return Pipeline(
        patterns=patterns or default_patterns(),
        workers=workers,
    ).clean(file_paths, config, allowlist)


def _scan_error(path: str, exc: BaseException) -> ProcessResult:
    logger.warning("scan failed for %s: %s", path, exc)
    return ProcessResult(file_path=path, error=_as_exception(exc))


def _modify_error(path: str, exc: BaseException) -> ModifyResult:
    logger.warning("clean failed for %s: %s", path, exc)
    return ModifyResult(file_path=path, success=False, error=_as_exception(exc))


def _as_exception(exc: BaseException) -> Exception:
    return exc if isinstance(exc, Exception) else RuntimeError(str(exc))
