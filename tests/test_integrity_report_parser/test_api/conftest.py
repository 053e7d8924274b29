"""Shared report fixtures for API tests."""

import pytest

XML_REPORT = (
    b'<?xml version="1.0" encoding="UTF-8"?>\n'
    b'<suite name="root">'
    b'<result successCount="3" failureCount="1" testExceptionCount="0" callExceptionCount="0"/>'
    b'</suite>\n'
)

# The summary result sits directly inside the outermost suite (suite depth 1)
# and the island opens with "<xmldata " as Integrity writes it; see the
# "Summary position" decision in DESIGN.md.
HTML_REPORT = (
    b'<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Strict//EN" '
    b'"http://www.w3.org/TR/xhtml1/DTD/xhtml1-strict.dtd">\n'
    b'<html><head><title>Integrity</title>'
    b'<script>if (a < b && c) { go(); }</script></head><body>\n'
    b'<xmldata xmlns:xsl="http://www.w3.org/1999/XSL/Transform">'
    b'<integrity name="T2">'
    b'<suite name="root"><suite name="inner">'
    b'<result type="call" value="<fixture>"/>'
    b'</suite>'
    b'<result successCount="5" failureCount="0" testExceptionCount="1" callExceptionCount="0"/>'
    b'</suite></integrity></xmldata>\n'
    b'<p>Rendered <b>report</b></p></body></html>\n'
)


@pytest.fixture
def xml_report(tmp_path):
    """Plain XML report without a test name: 3 successes, 1 failure."""
    path = tmp_path / "a" / "report.xml"
    path.parent.mkdir()
    path.write_bytes(XML_REPORT)
    return path


@pytest.fixture
def html_report(tmp_path):
    """HTML report named T2: 5 successes, 1 test exception."""
    path = tmp_path / "b" / "report.html"
    path.parent.mkdir()
    path.write_bytes(HTML_REPORT)
    return path
