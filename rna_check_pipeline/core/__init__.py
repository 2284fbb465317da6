#!/usr/bin/env python3

"""
Core module for the SSU rRNA check pipeline.

Contains the locus data structures, canonical ordering, the interval merge
engine, evidence collectors, the reconciliation session, exception types and
configuration management.
"""

from .data_structures import (
    GenomicInterval, EvidenceType, LocusDescriptor, Genome, Feature, Contig, SearchHit
)
from .exceptions import (
    PipelineError, ParseError, ValidationError, MergeError, SearchError,
    SessionStateError, ConfigurationError, MemoryError, GenomeError
)
from .config import PipelineConfig, load_config

__all__ = [
    'GenomicInterval', 'EvidenceType', 'LocusDescriptor', 'Genome', 'Feature', 'Contig', 'SearchHit',
    'PipelineError', 'ParseError', 'ValidationError', 'MergeError', 'SearchError',
    'SessionStateError', 'ConfigurationError', 'MemoryError', 'GenomeError',
    'PipelineConfig', 'load_config'
]
