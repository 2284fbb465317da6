#!/usr/bin/env python3

"""
Interval merge engine.

Folds incoming locus descriptors into a per-genome working set. A new
descriptor is merged into the first existing entry (in insertion order) of
the same genome and evidence type whose interval overlaps it on the same
strand. Only one merge is attempted per insertion: a candidate bridging two
disjoint entries extends the first and leaves the second alone. If nothing
overlaps, the candidate becomes a new entry.
"""

import logging
import threading
from collections import defaultdict
from typing import Dict, Iterator, List, Optional, Tuple

from intervaltree import IntervalTree, Interval

from .data_structures import EvidenceType, LocusDescriptor
from .exceptions import MergeError


def try_merge(existing: LocusDescriptor, candidate: LocusDescriptor) -> Optional[LocusDescriptor]:
    """
    Merge a candidate into an existing descriptor if they describe one locus.

    Args:
        existing: Descriptor already in the working set
        candidate: Newly observed descriptor

    Returns:
        The replacement for ``existing`` covering the union of both intervals,
        or None if genome, evidence type, contig or strand differ or the
        intervals do not overlap. Neither input is modified.
    """
    if existing.genome_id != candidate.genome_id:
        return None
    if existing.evidence_type is not candidate.evidence_type:
        return None
    if not existing.interval.overlaps(candidate.interval):
        return None
    return existing.with_interval(existing.interval.merge(candidate.interval))


class WorkingSet:
    """Descriptors collected for the genome currently being reconciled."""

    def __init__(self, genome_id: str):
        self.genome_id = genome_id
        self._entries: List[LocusDescriptor] = []
        self._lock = threading.Lock()
        self.merge_count = 0

    def insert(self, candidate: LocusDescriptor) -> bool:
        """
        Add a descriptor, merging it into the first overlapping entry.

        Returns:
            True if the candidate was merged, False if it was appended
        """
        if candidate.genome_id != self.genome_id:
            raise MergeError(f"Descriptor for genome {candidate.genome_id} offered to "
                             f"working set of genome {self.genome_id}")
        with self._lock:
            slot = self._find_merge_slot(candidate)
            if slot is None:
                self._append(candidate)
                return False
            merged = try_merge(self._entries[slot], candidate)
            self._replace(slot, merged)
            self.merge_count += 1
            logging.debug(f"Merged {candidate.interval} into {merged.interval} "
                          f"({candidate.evidence_type.name})")
            return True

    def _find_merge_slot(self, candidate: LocusDescriptor) -> Optional[int]:
        for slot, existing in enumerate(self._entries):
            if try_merge(existing, candidate) is not None:
                return slot
        return None

    def _append(self, descriptor: LocusDescriptor) -> None:
        self._entries.append(descriptor)

    def _replace(self, slot: int, descriptor: LocusDescriptor) -> None:
        self._entries[slot] = descriptor

    def descriptors(self) -> List[LocusDescriptor]:
        """Get a snapshot of the entries in insertion order."""
        with self._lock:
            return list(self._entries)

    def count(self, evidence_type: Optional[EvidenceType] = None) -> int:
        """Count entries, optionally of one evidence type."""
        if evidence_type is None:
            return len(self._entries)
        return sum(1 for d in self._entries if d.evidence_type is evidence_type)

    def __len__(self):
        return len(self._entries)

    def __iter__(self) -> Iterator[LocusDescriptor]:
        return iter(self.descriptors())


class IndexedWorkingSet(WorkingSet):
    """
    Working set backed by an interval tree per evidence type, contig and strand.

    Gives the same result as the linear scan: among the entries overlapping
    a candidate, the one inserted first absorbs it.
    """

    def __init__(self, genome_id: str):
        super().__init__(genome_id)
        self._trees: Dict[Tuple[EvidenceType, str, str], IntervalTree] = defaultdict(IntervalTree)

    @staticmethod
    def _tree_key(descriptor: LocusDescriptor) -> Tuple[EvidenceType, str, str]:
        interval = descriptor.interval
        return descriptor.evidence_type, interval.contig, interval.strand

    def _find_merge_slot(self, candidate: LocusDescriptor) -> Optional[int]:
        key = self._tree_key(candidate)
        if key not in self._trees:
            return None
        # IntervalTree intervals are half-open.
        hits = self._trees[key].overlap(candidate.interval.start, candidate.interval.end + 1)
        if not hits:
            return None
        return min(hit.data for hit in hits)

    def _append(self, descriptor: LocusDescriptor) -> None:
        slot = len(self._entries)
        self._entries.append(descriptor)
        interval = descriptor.interval
        self._trees[self._tree_key(descriptor)].addi(interval.start, interval.end + 1, slot)

    def _replace(self, slot: int, descriptor: LocusDescriptor) -> None:
        old = self._entries[slot].interval
        tree = self._trees[self._tree_key(descriptor)]
        tree.remove(Interval(old.start, old.end + 1, slot))
        tree.addi(descriptor.interval.start, descriptor.interval.end + 1, slot)
        self._entries[slot] = descriptor


def create_working_set(genome_id: str, indexed: bool = False) -> WorkingSet:
    """Create an empty working set for one genome."""
    if indexed:
        return IndexedWorkingSet(genome_id)
    return WorkingSet(genome_id)
