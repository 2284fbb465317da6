#!/usr/bin/env python3

"""
Canonical ordering for locus descriptors.

Descriptors sort by genome ID (natural order), then contig (natural order),
start, strand and end, then evidence type, then description. The order is
total, so sorting is deterministic whatever order the hits arrived in.

This ordering is only for reporting. Whether two descriptors describe the
same locus is decided by interval overlap in the merge engine.
"""

import re
from typing import Iterable, List, Tuple

from .data_structures import FORWARD, GenomicInterval, LocusDescriptor

_DIGITS = re.compile(r'(\d+)')


def natural_key(text: str) -> Tuple:
    """
    Sort key comparing embedded numbers by value.

    "genome.9" sorts before "genome.10". re.split with a capture group
    alternates text and digit runs starting with text, so the parts line up
    by type position-wise. The raw string breaks ties between spellings such
    as "7" and "007".
    """
    parts = _DIGITS.split(text)
    key = tuple(int(part) if i % 2 else part for i, part in enumerate(parts))
    return key, text


def interval_sort_key(interval: GenomicInterval) -> Tuple:
    """Position key: contig, start, strand (forward first), end."""
    return (natural_key(interval.contig), interval.start,
            0 if interval.strand == FORWARD else 1, interval.end)


def descriptor_sort_key(descriptor: LocusDescriptor) -> Tuple:
    """Full canonical sort key for a descriptor."""
    return (natural_key(descriptor.genome_id),
            interval_sort_key(descriptor.interval),
            descriptor.evidence_type.rank,
            descriptor.description)


def compare_descriptors(a: LocusDescriptor, b: LocusDescriptor) -> int:
    """Three-way comparison under the canonical ordering."""
    key_a, key_b = descriptor_sort_key(a), descriptor_sort_key(b)
    return (key_a > key_b) - (key_a < key_b)


def sort_descriptors(descriptors: Iterable[LocusDescriptor]) -> List[LocusDescriptor]:
    """Return the descriptors in canonical order."""
    return sorted(descriptors, key=descriptor_sort_key)
