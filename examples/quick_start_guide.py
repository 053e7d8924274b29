#!/usr/bin/env python3
"""
Quick Start Guide for the Integrity Report Parser.

Writes two small Integrity result files (one plain XML, one HTML page with an
embedded XML island) into a temporary directory, discovers them and ingests
them as one batch.
"""

import logging
import sys
import tempfile
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from integrity_report_parser import IngestionConfig, parse_report, parse_reports
from integrity_report_parser.api import collect_report_files

XML_REPORT = b"""<?xml version="1.0" encoding="UTF-8"?>
<integrity name="Unit Tests">
  <suite name="root">
    <result successCount="12" failureCount="1" testExceptionCount="0" callExceptionCount="0"/>
  </suite>
</integrity>
"""

HTML_REPORT = b"""<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Strict//EN" "xhtml1-strict.dtd">
<html><head><script>if (a < b) { render(); }</script></head><body>
<xmldata version="1"><integrity name="Web Tests"><suite name="root">
  <suite name="login"><result type="call" fixture="<LoginFixture>"/></suite>
  <result successCount="7" failureCount="0" testExceptionCount="2" callExceptionCount="1"/>
</suite></integrity></xmldata>
</body></html>
"""


def quick_start_example():
    """Quick start example showing basic usage."""

    print("QUICK START - Integrity Report Parser")
    print("=" * 40)

    with tempfile.TemporaryDirectory() as workdir:
        root = Path(workdir)
        (root / "unit").mkdir()
        (root / "web").mkdir()
        (root / "unit" / "integrity.xml").write_bytes(XML_REPORT)
        (root / "web" / "integrity.html").write_bytes(HTML_REPORT)

        # Step 1: Parse a single report
        print("\nStep 1: Single report")
        print("-" * 30)
        record = parse_report(root / "web" / "integrity.html")
        print(f"{record.display_name}: {record.content_type}")
        print(f"  success={record.success_count} failure={record.failure_count} "
              f"exceptions={record.exception_count}")

        # Step 2: Discover and ingest a batch
        print("\nStep 2: Batch ingestion")
        print("-" * 30)
        config = IngestionConfig().override(concurrency__thread_count=4)
        paths = collect_report_files(root, "**/integrity.*", config=config)
        aggregate = parse_reports(paths, config)

        for child in aggregate:
            print(f"  {child.identifier:<18} {child.display_name:<12} {child.status.value}")

        health = aggregate.health()
        print(f"\nTotals: {aggregate.summary()}")
        print(f"Health: {health.score}% ({aggregate.status.value})")
        print(f"Processed {aggregate.metrics.files_processed} files "
              f"with {aggregate.metrics.worker_count} workers")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    quick_start_example()
