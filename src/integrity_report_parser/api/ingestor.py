"""Ingestion of single Integrity report files.

Turns one report file into one ReportRecord, following a best-effort policy:
unreadable or malformed files still produce a record (with zero counts) and
the problem is reported as a diagnostic instead of being raised.
"""

import time
from pathlib import Path
from typing import BinaryIO, Callable, List, Optional

from lxml import etree

from integrity_report_parser.character import (
    BracketEscapingFilter,
    ConcatenatedByteStream,
    ContentKind,
    ParseWindow,
    RawReport,
    sniff_content_kind,
)
from integrity_report_parser.character.stream import PathLike
from integrity_report_parser.extraction import (
    ExtractionResult,
    SummaryExtractor,
    iter_parse_events,
)
from integrity_report_parser.shared import (
    CorrelationLogger,
    DiagnosticEntry,
    DiagnosticSeverity,
    IngestionConfig,
    get_logger,
)
from integrity_report_parser.tree import ReportRecord

# Receives every diagnostic as soon as it is produced
DiagnosticListener = Callable[[DiagnosticEntry], None]

COMPONENT = "ingestor"
MS_PER_SECOND = 1000


def open_parse_stream(buffer: bytes, kind: ContentKind, window: ParseWindow) -> BinaryIO:
    """Build the logical byte stream the parser reads for ``buffer``.

    HTML reports get their XML island repaired by a BracketEscapingFilter.
    """
    stream: BinaryIO = ConcatenatedByteStream(window.segments(buffer))  # type: ignore[assignment]
    if kind is ContentKind.HTML:
        stream = BracketEscapingFilter(stream)  # type: ignore[assignment]
    return stream


class ReportIngestor:
    """Parses report files into ReportRecords.

    Instances hold no per-file state and may be shared between threads.

    Args:
        config: Ingestion configuration (parser settings are used here)
        listener: Optional callback receiving each diagnostic
        correlation_id: Correlation ID of the surrounding batch
    """

    def __init__(
        self,
        config: Optional[IngestionConfig] = None,
        listener: Optional[DiagnosticListener] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.config = config or IngestionConfig()
        self.listener = listener
        self.correlation_id = correlation_id
        self._logger = get_logger(__name__, correlation_id, COMPONENT)

    def ingest_file(self, path: PathLike, identifier: Optional[str] = None) -> ReportRecord:
        """Read and parse one report file.

        Args:
            path: Location of the report file
            identifier: Identifier for the record (defaults to the file name)

        Returns:
            ReportRecord; never raises for I/O or parse failures
        """
        file_path = Path(path)
        identifier = identifier or file_path.name
        logger = self._logger.bind(report=identifier)
        logger.debug(
            "Now parsing Integrity test result file",
            extra={"path": str(file_path.absolute())},
        )

        try:
            raw = RawReport.read(file_path)
        except OSError as e:
            diagnostic = self._diagnose(
                logger,
                DiagnosticSeverity.ERROR,
                f"Could not read Integrity result file {file_path}: {e}",
                identifier,
            )
            return ReportRecord(
                identifier=identifier,
                test_name=None,
                raw_content=b"",
                content_type=sniff_content_kind(b"").content_type,
                source_path=file_path,
                diagnostics=(diagnostic,),
            )

        return self.ingest(raw, identifier)

    def ingest(self, raw: RawReport, identifier: Optional[str] = None) -> ReportRecord:
        """Parse an in-memory report.

        Args:
            raw: Report bytes and their origin
            identifier: Identifier for the record (defaults to the file name)

        Returns:
            ReportRecord retaining ``raw.content`` verbatim
        """
        identifier = identifier or raw.name
        logger = self._logger.bind(report=identifier)
        diagnostics: List[DiagnosticEntry] = []
        kind = sniff_content_kind(raw.content)

        if not raw.content:
            diagnostics.append(self._diagnose(
                logger, DiagnosticSeverity.WARNING, "Integrity result file is empty", identifier
            ))
            outcome = ExtractionResult()
        else:
            window = ParseWindow.locate(raw.content, kind)
            outcome = self._extract(raw.content, kind, window, identifier, logger, diagnostics)

        return ReportRecord(
            identifier=identifier,
            test_name=outcome.counts.test_name,
            raw_content=raw.content,
            content_type=kind.content_type,
            counts=outcome.counts,
            source_path=raw.path,
            diagnostics=tuple(diagnostics),
        )

    def _extract(
        self,
        buffer: bytes,
        kind: ContentKind,
        window: ParseWindow,
        identifier: str,
        logger: CorrelationLogger,
        diagnostics: List[DiagnosticEntry],
    ) -> ExtractionResult:
        start_time = time.time()
        extractor = SummaryExtractor()
        failed = False

        with open_parse_stream(buffer, kind, window) as stream:
            events = iter_parse_events(stream, self.config.parser)
            try:
                extractor.run(events)
            except (etree.LxmlError, ValueError, LookupError) as e:
                failed = True
                diagnostics.append(self._diagnose(
                    logger,
                    DiagnosticSeverity.ERROR,
                    f"Exception while parsing Integrity result: {e}",
                    identifier,
                    {"error_type": type(e).__name__},
                ))
            finally:
                events.close()

        outcome = extractor.result()
        for issue in outcome.issues:
            diagnostics.append(self._diagnose(
                logger, DiagnosticSeverity.WARNING, issue, identifier
            ))
        if not outcome.completed and not failed:
            diagnostics.append(self._diagnose(
                logger,
                DiagnosticSeverity.WARNING,
                "Integrity result contains no summary result element",
                identifier,
            ))

        logger.debug(
            "Finished parsing Integrity test result file",
            extra={
                "content_kind": kind.name,
                "doctype_end": window.doctype_end,
                "xml_start": window.xml_start,
                "events_consumed": outcome.events_consumed,
                "completed": outcome.completed,
                "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
            },
        )
        return outcome

    def _diagnose(
        self,
        logger: CorrelationLogger,
        severity: DiagnosticSeverity,
        message: str,
        identifier: str,
        details: Optional[dict] = None,
    ) -> DiagnosticEntry:
        entry = DiagnosticEntry(
            severity=severity,
            message=message,
            component=COMPONENT,
            details={"report": identifier, **(details or {})},
            correlation_id=self.correlation_id,
        )
        logger.warning(message, extra=details)
        if self.listener is not None:
            self.listener(entry)
        return entry
