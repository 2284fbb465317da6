#!/usr/bin/env python3

"""
Adapters connecting the reconciliation core to files and external tools.
"""

from .genome_source import DirectoryGenomeSource, GffFeatureParser, read_id_file
from .blast import BlastDatabase, BlastOptions, parse_tabular, create_search_engine
from .reporters import ListReportSink, CollectingSink, create_reporter

__all__ = [
    'DirectoryGenomeSource', 'GffFeatureParser', 'read_id_file',
    'BlastDatabase', 'BlastOptions', 'parse_tabular', 'create_search_engine',
    'ListReportSink', 'CollectingSink', 'create_reporter'
]
