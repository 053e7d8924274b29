"""Parallel ingestion of a batch of Integrity report files.

Every file is read and parsed by its own task on a bounded thread pool. The
tasks share nothing but the ResultAggregate they append to; ordering and
totals are established once, after the pool has drained.
"""

import concurrent.futures
import threading
import time
import uuid
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

import psutil

from integrity_report_parser.character.stream import PathLike
from integrity_report_parser.shared import (
    IngestionConfig,
    IngestionMetrics,
    OrchestrationError,
    get_logger,
)
from integrity_report_parser.tree import ResultAggregate

from .ingestor import DiagnosticListener, ReportIngestor

COMPONENT = "orchestrator"
DUPLICATE_SEPARATOR = "_"
MS_PER_SECOND = 1000


def available_parallelism() -> int:
    """Number of logical CPUs available to this process (at least 1)."""
    return psutil.cpu_count(logical=True) or 1


def assign_identifiers(paths: Iterable[PathLike]) -> List[Tuple[Path, str]]:
    """Pair every path with a batch-unique identifier.

    The identifier is the file's base name. A base name already used by an
    earlier file gets ``_1``, ``_2``, ... appended until it is unique.

    Example:
        >>> [name for _, name in assign_identifiers(["a/report.html", "b/report.html"])]
        ['report.html', 'report.html_1']
    """
    used: Set[str] = set()
    next_suffix: Dict[str, int] = {}
    assigned: List[Tuple[Path, str]] = []

    for entry in paths:
        path = Path(entry)
        base = path.name
        identifier = base
        if identifier in used:
            suffix = next_suffix.get(base, 1)
            identifier = f"{base}{DUPLICATE_SEPARATOR}{suffix}"
            while identifier in used:
                suffix += 1
                identifier = f"{base}{DUPLICATE_SEPARATOR}{suffix}"
            next_suffix[base] = suffix + 1
        used.add(identifier)
        assigned.append((path, identifier))

    return assigned


class ParallelIngestionOrchestrator:
    """Ingests many report files concurrently into one ResultAggregate.

    Args:
        config: Ingestion configuration; defaults to ``IngestionConfig.from_env()``
        listener: Optional callback receiving each diagnostic
        correlation_id: Correlation ID for the batch (generated if omitted)
    """

    def __init__(
        self,
        config: Optional[IngestionConfig] = None,
        listener: Optional[DiagnosticListener] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.config = config or IngestionConfig.from_env()
        self.listener = listener
        self.correlation_id = correlation_id or uuid.uuid4().hex
        self._logger = get_logger(__name__, self.correlation_id, COMPONENT)
        self._ingestor = ReportIngestor(self.config, listener, self.correlation_id)

    @property
    def worker_count(self) -> int:
        """Configured thread count, capped by the available parallelism."""
        return min(self.config.concurrency.thread_count, available_parallelism())

    def ingest(self, paths: Sequence[PathLike]) -> ResultAggregate:
        """Parse all ``paths`` and aggregate the resulting records.

        Args:
            paths: Report files to ingest

        Returns:
            Finalized ResultAggregate with one record per path

        Raises:
            OrchestrationError: If the pool does not drain within the
                configured timeout
        """
        start_time = time.time()
        assignments = assign_identifiers(paths)
        aggregate = ResultAggregate()
        workers = self.worker_count

        self._logger.info(
            "Starting Integrity result ingestion",
            extra={"file_count": len(assignments), "worker_count": workers},
        )

        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="integrity-ingest"
        )
        try:
            futures = [
                executor.submit(self._ingest_one, path, identifier, aggregate)
                for path, identifier in assignments
            ]
            executor.shutdown(wait=False)
            self._await_drain(futures)
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise

        aggregate.finalize()
        aggregate.metrics = self._collect_metrics(aggregate, workers, start_time)

        self._logger.info(
            "Finished Integrity result ingestion",
            extra={
                "file_count": len(aggregate),
                "files_failed": aggregate.metrics.files_failed,
                "summary": aggregate.summary(),
                "processing_time_ms": aggregate.metrics.processing_time_ms,
            },
        )
        return aggregate

    def _ingest_one(self, path: Path, identifier: str, aggregate: ResultAggregate) -> None:
        aggregate.append_child(self._ingestor.ingest_file(path, identifier))

    def _await_drain(self, futures: List[concurrent.futures.Future]) -> None:
        timeout = self.config.concurrency.drain_timeout_seconds
        deadline = time.monotonic() + timeout
        pending = set(futures)

        while pending:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                for future in pending:
                    future.cancel()
                self._logger.critical(
                    "Worker pool did not drain in time",
                    extra={"pending_tasks": len(pending), "timeout_seconds": timeout},
                    exc_info=False,
                )
                raise OrchestrationError(
                    f"{len(pending)} ingestion task(s) still running after {timeout} seconds"
                )
            try:
                done, pending = concurrent.futures.wait(
                    pending,
                    timeout=min(remaining, threading.TIMEOUT_MAX),
                    return_when=concurrent.futures.ALL_COMPLETED,
                )
            except InterruptedError:
                continue
            for future in done:
                # per-file failures are absorbed by the ingestor; anything else is fatal
                future.result()

    def _collect_metrics(
        self, aggregate: ResultAggregate, workers: int, start_time: float
    ) -> IngestionMetrics:
        children = aggregate.children
        return IngestionMetrics(
            processing_time_ms=(time.time() - start_time) * MS_PER_SECOND,
            files_processed=len(children),
            files_failed=sum(1 for record in children if record.has_errors),
            bytes_read=sum(len(record.raw_content) for record in children),
            worker_count=workers,
        )
