"""Extraction of execution totals from a stream of parse events.

An Integrity result document contains exactly one summary ``result`` element
directly below the outermost ``suite``. Call results are ``result`` elements
too, but they always carry a ``type`` attribute and sit at varying depths.
Once the summary has been read, nothing else in the document is of interest,
so the extractor asks its driver to stop.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from integrity_report_parser.shared.result import SummaryCounts

from .events import EnterElement, ExitElement, ParseEvent

SUITE_ELEMENT = "suite"
RESULT_ELEMENT = "result"
INTEGRITY_ELEMENT = "integrity"
STYLESHEET_ELEMENT = "xsl:stylesheet"

NAME_ATTRIBUTE = "name"
TYPE_ATTRIBUTE = "type"

# Depth of the suite whose result holds the execution totals
SUMMARY_SUITE_DEPTH = 1

COUNT_ATTRIBUTES: Tuple[Tuple[str, str], ...] = (
    ("successCount", "success_count"),
    ("failureCount", "failure_count"),
    ("testExceptionCount", "test_exception_count"),
    ("callExceptionCount", "call_exception_count"),
)


@dataclass
class ExtractionResult:
    """Outcome of running a SummaryExtractor over an event stream.

    Attributes:
        counts: Totals read from the summary element (all zero if not found)
        completed: Whether the summary element was found
        events_consumed: Number of events handled before stopping
        issues: Problems with attribute values that were worked around
    """

    counts: SummaryCounts = field(default_factory=SummaryCounts.empty)
    completed: bool = False
    events_consumed: int = 0
    issues: List[str] = field(default_factory=list)


class SummaryExtractor:
    """Streaming consumer that picks the summary counts out of a report.

    Feed events through ``handle``; it returns ``False`` as soon as the summary
    has been captured, after which the remaining events must not be pulled.
    """

    def __init__(self) -> None:
        self.suite_depth = 0
        self.inside_stylesheet = False
        self.test_name: Optional[str] = None
        self.completed = False
        self.issues: List[str] = []
        self._counts = {attribute: 0 for _, attribute in COUNT_ATTRIBUTES}
        self._events = 0

    @property
    def counts(self) -> SummaryCounts:
        """Counts captured so far."""
        return SummaryCounts(test_name=self.test_name, **self._counts)

    def handle(self, event: ParseEvent) -> bool:
        """Process a single event.

        Returns:
            ``True`` to receive further events, ``False`` once done
        """
        if self.completed:
            return False
        self._events += 1

        if isinstance(event, EnterElement):
            return self._enter(event)
        if isinstance(event, ExitElement):
            self._exit(event)
            return True
        raise TypeError(f"Unsupported parse event: {event!r}")

    def run(self, events: Iterable[ParseEvent]) -> ExtractionResult:
        """Drive the extractor over ``events`` until it is satisfied.

        Exceptions raised while producing events propagate; whatever was
        captured up to that point stays available through ``result()``.
        """
        for event in events:
            if not self.handle(event):
                break
        return self.result()

    def result(self) -> ExtractionResult:
        """Snapshot of the current extraction state."""
        return ExtractionResult(
            counts=self.counts,
            completed=self.completed,
            events_consumed=self._events,
            issues=list(self.issues),
        )

    def _enter(self, event: EnterElement) -> bool:
        if self.inside_stylesheet:
            return True

        if event.name == STYLESHEET_ELEMENT:
            self.inside_stylesheet = True
        elif event.name == SUITE_ELEMENT:
            self.suite_depth += 1
        elif event.name == INTEGRITY_ELEMENT:
            self.test_name = event.get(NAME_ATTRIBUTE)
        elif event.name == RESULT_ELEMENT and self._is_summary(event):
            for attribute_name, count_name in COUNT_ATTRIBUTES:
                raw = event.get(attribute_name)
                if raw is not None:
                    self._counts[count_name] = self._parse_count(attribute_name, raw)
            self.completed = True
            return False
        return True

    def _exit(self, event: ExitElement) -> None:
        if self.inside_stylesheet:
            if event.name == STYLESHEET_ELEMENT:
                self.inside_stylesheet = False
        elif event.name == SUITE_ELEMENT:
            self.suite_depth -= 1

    def _is_summary(self, event: EnterElement) -> bool:
        return self.suite_depth == SUMMARY_SUITE_DEPTH and not event.has(TYPE_ATTRIBUTE)

    def _parse_count(self, attribute_name: str, raw: str) -> int:
        try:
            value = int(raw.strip())
        except ValueError:
            self.issues.append(f"Attribute {attribute_name} is not an integer: {raw!r}")
            return 0
        if value < 0:
            self.issues.append(f"Attribute {attribute_name} is negative: {value}")
            return 0
        return value
