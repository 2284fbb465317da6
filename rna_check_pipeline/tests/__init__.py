#!/usr/bin/env python3

"""
Test suite for the SSU rRNA check pipeline.

Unit tests covering:
- Genomic intervals, locus descriptors and canonical ordering
- The interval merge engine and working sets
- Annotation scanning and batched homology search
- The reconciliation session and pipeline failure policies
- Configuration management
- File and BLAST adapters
"""
