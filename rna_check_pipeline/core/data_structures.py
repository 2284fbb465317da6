#!/usr/bin/env python3

"""
Core data structures for the SSU rRNA check pipeline.

Defines genomic intervals, the genome/feature/hit records consumed from the
outside world, and the locus descriptors produced by reconciliation.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional

from .exceptions import ValidationError, MergeError

FORWARD = '+'
REVERSE = '-'
STRANDS = (FORWARD, REVERSE)


@dataclass(frozen=True)
class GenomicInterval:
    """A 1-based, inclusive region on one strand of a contig."""
    contig: str
    start: int
    end: int
    strand: str = FORWARD

    def __post_init__(self):
        """Validate interval data after initialization."""
        if not self.contig:
            raise ValidationError("Contig ID cannot be empty")
        if self.strand not in STRANDS:
            raise ValidationError(f"Invalid strand: {self.strand!r}", contig=self.contig)
        if self.start < 1:
            raise ValidationError(f"Invalid start coordinate: {self.start}", contig=self.contig)
        if self.start > self.end:
            raise ValidationError(f"Invalid interval coordinates: {self.start}-{self.end}",
                                  contig=self.contig)

    @property
    def length(self) -> int:
        """Get interval length."""
        return self.end - self.start + 1

    @property
    def begin(self) -> int:
        """First base in the direction of the strand."""
        return self.start if self.strand == FORWARD else self.end

    def is_same_strand(self, other: 'GenomicInterval') -> bool:
        """Check if both intervals lie on the same strand of the same contig."""
        return self.contig == other.contig and self.strand == other.strand

    def overlaps(self, other: 'GenomicInterval') -> bool:
        """Check if this interval overlaps another on the same strand (inclusive)."""
        return (self.is_same_strand(other) and
                self.start <= other.end and other.start <= self.end)

    def merge(self, other: 'GenomicInterval') -> 'GenomicInterval':
        """Return the coordinate union of two intervals on the same strand."""
        if not self.is_same_strand(other):
            raise MergeError(f"Cannot merge {self} with {other}: different contig or strand")
        return replace(self, start=min(self.start, other.start), end=max(self.end, other.end))

    def reverse(self) -> 'GenomicInterval':
        """Same bases on the opposite strand."""
        return replace(self, strand=REVERSE if self.strand == FORWARD else FORWARD)

    def __str__(self):
        return f"{self.contig}_{self.begin}{self.strand}{self.length}"


class EvidenceType(Enum):
    """How a locus was found. Declaration order is the report order."""
    HOMOLOGY_HIT = "Blast Hit"
    ANNOTATION = "RNA Annotation"

    @property
    def description(self) -> str:
        return self.value

    @property
    def rank(self) -> int:
        return _EVIDENCE_RANK[self]


_EVIDENCE_RANK = {evidence: i for i, evidence in enumerate(EvidenceType)}


@dataclass(frozen=True)
class Contig:
    """A named nucleotide sequence belonging to a genome."""
    id: str
    sequence: str

    def __len__(self):
        return len(self.sequence)


@dataclass
class Feature:
    """A structural annotation record from a genome."""
    id: str
    type: str
    function: str = ""
    location: Optional[GenomicInterval] = None

    def __post_init__(self):
        if not self.id:
            raise ValidationError("Feature ID cannot be empty")


@dataclass
class Genome:
    """A genome with its contigs and feature annotations."""
    id: str
    name: str = ""
    contigs: List[Contig] = field(default_factory=list)
    features: List[Feature] = field(default_factory=list)

    def __post_init__(self):
        """Validate genome data after initialization."""
        if not self.id:
            raise ValidationError("Genome ID cannot be empty")
        if not self.name:
            self.name = self.id

    @property
    def contig_count(self) -> int:
        """Get number of contigs."""
        return len(self.contigs)

    def __str__(self):
        return f"{self.id} ({self.name})"


@dataclass(frozen=True)
class SearchHit:
    """One alignment returned by the homology search engine."""
    query_location: GenomicInterval
    subject_location: GenomicInterval
    subject_def: str
    e_value: float = 0.0
    pct_subject_coverage: float = 100.0

    def oriented_query_location(self) -> GenomicInterval:
        """Query location in the sense the genome sequence was aligned.

        When the query and subject strands disagree the query location is
        reversed, so hits against either strand of the reference land on the
        same genomic strand.
        """
        if self.query_location.strand == self.subject_location.strand:
            return self.query_location
        return self.query_location.reverse()


@dataclass(frozen=True)
class LocusDescriptor:
    """A candidate SSU rRNA locus in one genome."""
    genome_id: str
    genome_name: str
    interval: GenomicInterval
    evidence_type: EvidenceType
    description: str = ""

    def __post_init__(self):
        """Validate descriptor data after initialization."""
        if not self.genome_id:
            raise ValidationError("Genome ID cannot be empty", contig=self.interval.contig)
        if not isinstance(self.evidence_type, EvidenceType):
            raise ValidationError(f"Invalid evidence type: {self.evidence_type!r}",
                                  genome_id=self.genome_id)

    @classmethod
    def from_hit(cls, genome: Genome, hit: SearchHit) -> 'LocusDescriptor':
        """Create a descriptor for a homology search hit."""
        return cls(
            genome_id=genome.id,
            genome_name=genome.name,
            interval=hit.oriented_query_location(),
            evidence_type=EvidenceType.HOMOLOGY_HIT,
            description=hit.subject_def
        )

    @classmethod
    def from_feature(cls, genome: Genome, feature: Feature) -> 'LocusDescriptor':
        """Create a descriptor for an annotated RNA feature."""
        if feature.location is None:
            raise ValidationError(f"Feature {feature.id} has no location", genome_id=genome.id)
        return cls(
            genome_id=genome.id,
            genome_name=genome.name,
            interval=feature.location,
            evidence_type=EvidenceType.ANNOTATION,
            description=feature.id
        )

    @property
    def length(self) -> int:
        return self.interval.length

    def with_interval(self, interval: GenomicInterval) -> 'LocusDescriptor':
        """Copy of this descriptor covering a different interval."""
        return replace(self, interval=interval)

    @staticmethod
    def header() -> str:
        """Get the header line for a descriptor report."""
        return "genome_id\tgenome_name\tlength\tlocation\ttype\tdescription"

    def output(self) -> str:
        """Get the report line for this descriptor."""
        return "\t".join([
            self.genome_id, self.genome_name, str(self.length), str(self.interval),
            self.evidence_type.description, self.description
        ])
