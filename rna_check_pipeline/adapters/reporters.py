#!/usr/bin/env python3

"""
Report sinks for reconciled SSU rRNA loci.
"""

import sys
from typing import Dict, Optional, Sequence, TextIO

from ..core.data_structures import Genome, LocusDescriptor
from ..core.exceptions import ConfigurationError


class ListReportSink:
    """Tab-separated list of loci, one block per genome."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self.genome_count = 0
        self.line_count = 0

    def _println(self, line: str = "") -> None:
        self.stream.write(line + "\n")

    def open_report(self) -> None:
        self._println(LocusDescriptor.header())

    def record_genome(self, genome: Genome, descriptors: Sequence[LocusDescriptor]) -> None:
        # Blank separator line before each genome's block
        self._println()
        for descriptor in descriptors:
            self._println(descriptor.output())
            self.line_count += 1
        self.genome_count += 1

    def finish(self) -> None:
        self.stream.flush()


class CollectingSink:
    """Keeps the reported descriptors in memory, keyed by genome ID."""

    def __init__(self):
        self.opened = False
        self.finished = False
        self.results: Dict[str, Sequence[LocusDescriptor]] = {}

    def open_report(self) -> None:
        self.opened = True

    def record_genome(self, genome: Genome, descriptors: Sequence[LocusDescriptor]) -> None:
        self.results[genome.id] = descriptors

    def finish(self) -> None:
        self.finished = True


REPORT_FORMATS = {
    'list': ListReportSink,
}


def create_reporter(report_format: str, stream: Optional[TextIO] = None):
    """Create a report sink of the named format writing to a stream."""
    try:
        sink_class = REPORT_FORMATS[report_format.lower()]
    except KeyError:
        raise ConfigurationError(f"Unknown report format: {report_format}")
    return sink_class(stream)
