#!/usr/bin/env python3

"""
Interfaces to the collaborators outside the reconciliation core.

The core only relies on these shapes; concrete implementations live in
``rna_check_pipeline.adapters``.
"""

from dataclasses import dataclass
from typing import Iterator, List, Protocol, Sequence

from .data_structures import Contig, Genome, LocusDescriptor, SearchHit


@dataclass(frozen=True)
class SearchParameters:
    """Acceptance thresholds passed to the homology search engine."""
    min_subject_coverage_pct: float = 95.0
    max_e_value: float = 1e-10

    def accepts(self, hit: SearchHit) -> bool:
        """Check a hit against both thresholds."""
        return (hit.pct_subject_coverage >= self.min_subject_coverage_pct and
                hit.e_value <= self.max_e_value)


class GenomeSource(Protocol):
    """A collection of genomes, yielded one at a time."""

    def __iter__(self) -> Iterator[Genome]:
        ...

    def __len__(self) -> int:
        ...


class HomologySearchEngine(Protocol):
    """Searches nucleotide sequences against a reference RNA database."""

    def search(self, contigs: Sequence[Contig], parameters: SearchParameters) -> List[SearchHit]:
        ...


class ReportSink(Protocol):
    """Receives the final ordered descriptors for each genome."""

    def open_report(self) -> None:
        ...

    def record_genome(self, genome: Genome, descriptors: Sequence[LocusDescriptor]) -> None:
        ...

    def finish(self) -> None:
        ...
