#!/usr/bin/env python3

"""
Evidence collectors: the annotation scanner and the batch search driver.

Both push locus descriptors into a genome's working set.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Iterator, List, Optional, Pattern, Sequence, Union

from .data_structures import Contig, Genome, LocusDescriptor, SearchHit
from .exceptions import SearchError, ValidationError
from .interfaces import HomologySearchEngine, SearchParameters
from .merge import WorkingSet

SSU_RRNA_PATTERN = (r"SSU\s+rRNA|Small\s+Subunit\s+(?:Ribosomal\s+r?)?RNA|ssuRNA|"
                    r"16S\s+(?:r(?:ibosomal\s+)?)?RNA")

DEFAULT_RNA_TYPES = ("rna", "rRNA")


class AnnotationScanner:
    """Finds annotated SSU rRNA features in a genome."""

    def __init__(self, pattern: Union[str, Pattern] = SSU_RRNA_PATTERN,
                 rna_types: Iterable[str] = DEFAULT_RNA_TYPES):
        if isinstance(pattern, str):
            pattern = re.compile(pattern, re.IGNORECASE)
        self.pattern = pattern
        self.rna_types = frozenset(rna_types)
        self.skipped_features = 0

    def is_target(self, feature) -> bool:
        """Check if a feature is an RNA whose function names the target RNA."""
        return feature.type in self.rna_types and bool(self.pattern.search(feature.function or ""))

    def scan(self, genome: Genome, working_set: WorkingSet) -> int:
        """
        Record every annotated SSU rRNA of a genome in the working set.

        Args:
            genome: Genome whose features are scanned
            working_set: Working set of the genome

        Returns:
            Number of descriptors recorded
        """
        found = 0
        for feature in genome.features:
            if not self.is_target(feature):
                continue
            try:
                descriptor = LocusDescriptor.from_feature(genome, feature)
            except ValidationError as e:
                logging.warning(f"Skipping feature {feature.id} in {genome.id}: {e}")
                self.skipped_features += 1
                continue
            working_set.insert(descriptor)
            found += 1
        logging.debug(f"{found} annotated SSU rRNA features found in {genome.id}")
        return found


def iter_batches(contigs: Sequence[Contig], batch_size: int) -> Iterator[List[Contig]]:
    """Split contigs into consecutive batches of at most batch_size."""
    if batch_size < 1:
        raise ValueError(f"Invalid batch size: {batch_size}")
    for i in range(0, len(contigs), batch_size):
        yield list(contigs[i:i + batch_size])


class BatchSearchDriver:
    """Runs a genome's contigs through the homology search engine in batches."""

    def __init__(self, engine: HomologySearchEngine,
                 parameters: Optional[SearchParameters] = None,
                 batch_size: int = 20,
                 skip_failed_batches: bool = False,
                 parallel_workers: int = 1):
        self.engine = engine
        self.parameters = parameters or SearchParameters()
        self.batch_size = batch_size
        self.skip_failed_batches = skip_failed_batches
        self.parallel_workers = parallel_workers
        self.failed_batches = 0
        self.rejected_hits = 0

    def search_genome(self, genome: Genome, working_set: WorkingSet) -> int:
        """
        Search all contigs of a genome and record the hits in the working set.

        Hits are applied in batch order, so the result does not depend on
        the batch size or on how many batches run at once.

        Returns:
            Number of hits accepted into the working set
        """
        batches = list(iter_batches(genome.contigs, self.batch_size))
        if not batches:
            return 0

        def run(indexed_batch):
            index, batch = indexed_batch
            return self._search_batch(genome, index, batch)

        accepted = 0
        if self.parallel_workers > 1 and len(batches) > 1:
            with ThreadPoolExecutor(max_workers=self.parallel_workers) as executor:
                results = list(executor.map(run, enumerate(batches)))
        else:
            results = map(run, enumerate(batches))

        for hits in results:
            if hits is None:
                self.failed_batches += 1
                continue
            accepted += self._record_hits(genome, hits, working_set)
        return accepted

    def _search_batch(self, genome: Genome, index: int, batch: List[Contig]) -> Optional[List[SearchHit]]:
        """Submit one batch. Returns None if it failed and failures are skipped."""
        try:
            hits = self.engine.search(batch, self.parameters)
        except (SearchError, OSError) as e:
            error = SearchError(str(e), genome_id=genome.id, batch_index=index)
            if not self.skip_failed_batches:
                raise error from e
            logging.warning(f"Skipping failed batch: {error}")
            return None
        logging.info(f"{len(hits)} hits found against {genome.id} in batch {index + 1} "
                     f"({len(batch)} contigs).")
        return hits

    def _record_hits(self, genome: Genome, hits: List[SearchHit], working_set: WorkingSet) -> int:
        accepted = 0
        for hit in hits:
            if not self.parameters.accepts(hit):
                self.rejected_hits += 1
                continue
            working_set.insert(LocusDescriptor.from_hit(genome, hit))
            accepted += 1
        return accepted
