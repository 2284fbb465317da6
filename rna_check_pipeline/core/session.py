#!/usr/bin/env python3

"""
Reconciliation session.

Owns the working set of the one genome currently open and drives the report
sink through its lifecycle:

    IDLE -> REPORT_OPEN -> GENOME_OPEN -> GENOME_CLOSED -> ... -> FINISHED
"""

import logging
from enum import Enum
from typing import List, Optional

from .data_structures import Genome, LocusDescriptor
from .exceptions import SessionStateError
from .interfaces import ReportSink
from .merge import WorkingSet, create_working_set
from .ordering import sort_descriptors


class SessionState(Enum):
    IDLE = "idle"
    REPORT_OPEN = "report_open"
    GENOME_OPEN = "genome_open"
    GENOME_CLOSED = "genome_closed"
    FINISHED = "finished"


class ReconciliationSession:
    """Collects evidence for one genome at a time and reports it in canonical order."""

    def __init__(self, sink: ReportSink, use_interval_index: bool = False):
        self.sink = sink
        self.use_interval_index = use_interval_index
        self.state = SessionState.IDLE
        self.current_genome: Optional[Genome] = None
        self._working_set: Optional[WorkingSet] = None
        self.genomes_reported = 0
        self.genomes_omitted = 0

    def _require(self, *states: SessionState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.name for s in states)
            raise SessionStateError(f"Operation requires state {allowed}", state=self.state.name)

    def open_report(self) -> None:
        """Start the report. Must be called once before any genome is opened."""
        self._require(SessionState.IDLE)
        self.sink.open_report()
        self.state = SessionState.REPORT_OPEN

    def open_genome(self, genome: Genome) -> WorkingSet:
        """Begin collecting evidence for a genome."""
        self._require(SessionState.REPORT_OPEN, SessionState.GENOME_CLOSED)
        self.current_genome = genome
        self._working_set = create_working_set(genome.id, self.use_interval_index)
        self.state = SessionState.GENOME_OPEN
        return self._working_set

    @property
    def working_set(self) -> WorkingSet:
        """Working set of the open genome."""
        self._require(SessionState.GENOME_OPEN)
        return self._working_set

    def record(self, descriptor: LocusDescriptor) -> bool:
        """Fold one descriptor into the open genome's working set."""
        return self.working_set.insert(descriptor)

    def _check_current(self, genome: Genome) -> None:
        self._require(SessionState.GENOME_OPEN)
        if genome.id != self.current_genome.id:
            raise SessionStateError(f"Genome {genome.id} is not the open genome "
                                    f"({self.current_genome.id})", state=self.state.name)

    def close_genome(self, genome: Genome) -> List[LocusDescriptor]:
        """
        Finish a genome and hand its sorted descriptors to the sink.

        Returns:
            The descriptors as reported, in canonical order
        """
        self._check_current(genome)
        descriptors = sort_descriptors(self._working_set.descriptors())
        self.sink.record_genome(genome, tuple(descriptors))
        self._discard()
        self.genomes_reported += 1
        return descriptors

    def abandon_genome(self, genome: Genome, reason: str) -> None:
        """Close a genome without reporting anything for it."""
        self._check_current(genome)
        logging.warning(f"Omitting genome {genome} from report: {reason}")
        self._discard()
        self.genomes_omitted += 1

    def _discard(self) -> None:
        self._working_set = None
        self.current_genome = None
        self.state = SessionState.GENOME_CLOSED

    def finish(self) -> None:
        """Complete the report. No genomes can be opened afterwards."""
        self._require(SessionState.REPORT_OPEN, SessionState.GENOME_CLOSED)
        self.sink.finish()
        self.state = SessionState.FINISHED
