#!/usr/bin/env python3

"""
Main pipeline class for SSU rRNA checking.

For each genome, collects annotated SSU rRNAs and homology search hits into
one reconciled locus set and sends it to the report sink.
"""

import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Any, Iterable, Optional

from .config import PipelineConfig
from .data_structures import EvidenceType, Genome
from .exceptions import PipelineError, SearchError
from .interfaces import HomologySearchEngine, ReportSink, SearchParameters
from .processors import AnnotationScanner, BatchSearchDriver
from .session import ReconciliationSession
from ..utils.performance_monitor import PerformanceMonitor


@dataclass
class RunSummary:
    """Counts collected over one pipeline run."""
    genomes_processed: int = 0
    genomes_omitted: int = 0
    annotation_loci: int = 0
    homology_loci: int = 0
    annotated_features: int = 0
    accepted_hits: int = 0
    failed_batches: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class RnaCheckPipeline:
    """Main pipeline class that coordinates evidence collection and reporting."""

    def __init__(self, config: PipelineConfig, engine: HomologySearchEngine, sink: ReportSink):
        self.config = config
        self.engine = engine
        self.sink = sink
        self.monitor = PerformanceMonitor(memory_limit_mb=config.memory_limit_mb,
                                          enabled=config.enable_memory_monitoring)
        self.session = ReconciliationSession(sink, use_interval_index=config.use_interval_index)
        self.scanner = AnnotationScanner(config.ssu_pattern, config.rna_feature_types)
        self.driver = BatchSearchDriver(
            engine,
            SearchParameters(config.min_subject_coverage_pct, config.max_e_value),
            batch_size=config.batch_size,
            skip_failed_batches=config.on_search_error == 'skip_batch',
            parallel_workers=config.parallel_workers
        )
        self.summary = RunSummary()

    def run(self, genomes: Iterable[Genome], output_dir: Optional[str] = None) -> bool:
        """
        Run the pipeline, logging instead of raising on failure.

        Args:
            genomes: Genome source to check
            output_dir: Directory for the run log (optional)

        Returns:
            True if pipeline completed successfully
        """
        try:
            if output_dir:
                Path(output_dir).mkdir(parents=True, exist_ok=True)
                self._setup_pipeline_logging(output_dir)
            self.process(genomes)
            self.monitor.log_performance_report()
            return True

        except PipelineError as e:
            logging.error(f"Pipeline failed: {e}")
            logging.debug("Full traceback:", exc_info=True)
            return False

    def _setup_pipeline_logging(self, output_dir: str) -> None:
        """Set up pipeline-specific logging."""
        log_file = Path(output_dir) / 'rna_check.log'

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s'
        ))

        root_logger = logging.getLogger()
        root_logger.addHandler(file_handler)

        if self.config.debug_mode:
            root_logger.setLevel(logging.DEBUG)

    def process(self, genomes: Iterable[Genome]) -> RunSummary:
        """
        Check every genome in the source.

        A search failure aborts the run unless the configuration says to
        skip the failing batch or genome.

        Returns:
            Summary counts for the run
        """
        total = len(genomes) if hasattr(genomes, '__len__') else '?'
        logging.info("Starting SSU rRNA check")
        self.session.open_report()

        for count, genome in enumerate(genomes, 1):
            logging.info(f"Processing genome {count} of {total}: {genome}.")
            self._process_genome(genome)
            if self.config.enable_memory_monitoring:
                self.monitor.check_memory_limit()

        self.session.finish()
        self.summary.failed_batches = self.driver.failed_batches
        logging.info(f"{self.summary.genomes_processed} genomes processed. "
                     f"{self.summary.homology_loci} RNAs found by BLAST, "
                     f"{self.summary.annotation_loci} from annotations.")
        if self.summary.genomes_omitted:
            logging.warning(f"{self.summary.genomes_omitted} genomes omitted because of search failures.")
        return self.summary

    def _process_genome(self, genome: Genome) -> None:
        """Collect, reconcile and report the evidence for one genome."""
        working_set = self.session.open_genome(genome)

        with self.monitor.phase_context("annotation_scan"):
            found = self.scanner.scan(genome, working_set)
            self.monitor.record_operations(len(genome.features))
        self.summary.annotated_features += found

        with self.monitor.phase_context("homology_search"):
            try:
                accepted = self.driver.search_genome(genome, working_set)
            except SearchError as e:
                if self.config.on_search_error != 'skip_genome':
                    raise
                self.session.abandon_genome(genome, str(e))
                self.summary.genomes_omitted += 1
                return
            self.monitor.record_operations(genome.contig_count)
        self.summary.accepted_hits += accepted

        with self.monitor.phase_context("report"):
            descriptors = self.session.close_genome(genome)

        homology = sum(1 for d in descriptors if d.evidence_type is EvidenceType.HOMOLOGY_HIT)
        self.summary.homology_loci += homology
        self.summary.annotation_loci += len(descriptors) - homology
        self.summary.genomes_processed += 1
