#!/usr/bin/env python3

"""
SSU rRNA Check Pipeline

Compares the 16S (SSU) rRNA loci annotated in a set of genomes with the loci
a BLAST search against a reference RNA database finds, and reports both per
genome in one reconciled, de-duplicated, ordered list.

Modules:
- core: Locus data structures, ordering, merge engine, session, configuration
- adapters: Genome source, BLAST search engine and report writers
- utils: Performance monitoring
- tests: Unit test suite
"""

__version__ = "1.0.0"
__author__ = "RNA Check Pipeline Team"

# Import main components for easy access
from .core.data_structures import (
    GenomicInterval, EvidenceType, LocusDescriptor, Genome, Feature, Contig, SearchHit
)
from .core.exceptions import (
    PipelineError, ParseError, ValidationError, MergeError, SearchError,
    SessionStateError, ConfigurationError, MemoryError, GenomeError
)
from .core.config import PipelineConfig, load_config
from .core.interfaces import SearchParameters
from .core.merge import try_merge, WorkingSet, IndexedWorkingSet
from .core.ordering import sort_descriptors, natural_key
from .core.session import ReconciliationSession
from .core.pipeline import RnaCheckPipeline, RunSummary

__all__ = [
    # Main pipeline
    'RnaCheckPipeline', 'RunSummary', 'ReconciliationSession',
    # Data structures
    'GenomicInterval', 'EvidenceType', 'LocusDescriptor', 'Genome', 'Feature', 'Contig',
    'SearchHit', 'SearchParameters',
    # Merge and ordering
    'try_merge', 'WorkingSet', 'IndexedWorkingSet', 'sort_descriptors', 'natural_key',
    # Exceptions
    'PipelineError', 'ParseError', 'ValidationError', 'MergeError', 'SearchError',
    'SessionStateError', 'ConfigurationError', 'MemoryError', 'GenomeError',
    # Configuration
    'PipelineConfig', 'load_config'
]
