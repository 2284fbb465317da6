#!/usr/bin/env python3

"""
Command-line interface for the SSU rRNA check pipeline.

Finds the annotated SSU rRNAs in each genome of a genome directory, BLASTs
the genome against a reference SSU database (e.g. SILVA NR99), and lists the
reconciled loci for comparison.
"""

import argparse
import sys
import os
import logging
from contextlib import ExitStack

from rna_check_pipeline.core.config import load_config, SEARCH_ERROR_POLICIES
from rna_check_pipeline.core.exceptions import PipelineError


def setup_logging(log_level: str = "INFO") -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        description="Compare annotated and BLAST-detected SSU rRNA loci across genomes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic usage
  python pipeline_cli.py SILVA_SSURef_NR99.fasta genomes/ -o rna_check.tsv

  # Stricter hits, keep going when a BLAST batch fails
  python pipeline_cli.py silva.fasta genomes/ --min-subject 98 --max-e 1e-20 --on-search-error skip_batch
        """
    )

    # Required arguments
    parser.add_argument(
        'reference',
        help='Reference SSU rRNA FASTA file (BLAST database is built next to it if needed)'
    )
    parser.add_argument(
        'genome_dir',
        help='Directory of genome FASTA files with matching GFF3 annotations'
    )

    # Optional parameters
    parser.add_argument(
        '-o', '--output',
        help='Output report file (default: standard output)'
    )
    parser.add_argument(
        '--output-dir',
        help='Directory for the run log'
    )
    parser.add_argument(
        '--id-file',
        help='File listing the genome IDs to process (default: all genomes in the directory)'
    )
    parser.add_argument(
        '--min-subject', '--minS',
        type=float,
        help='Minimum percent of the reference sequence a hit must cover (default: 95)'
    )
    parser.add_argument(
        '--max-e', '--evalue',
        type=float,
        help='Maximum permissible e-value (default: 1e-10)'
    )
    parser.add_argument(
        '--batch-size',
        type=int,
        help='Number of contigs per BLAST batch (default: 20)'
    )
    parser.add_argument(
        '--format',
        dest='report_format',
        choices=['list'],
        help='Output report format (default: list)'
    )
    parser.add_argument(
        '--on-search-error',
        choices=SEARCH_ERROR_POLICIES,
        help='What to do when a BLAST batch fails (default: abort)'
    )
    parser.add_argument(
        '--workers',
        type=int,
        help='Number of BLAST batches to run at once (default: 1)'
    )
    parser.add_argument(
        '--config',
        help='Configuration file (JSON or YAML)'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
        help='Logging level (default: INFO)'
    )

    return parser


def validate_inputs(args) -> None:
    """Validate that the reference and genome inputs exist."""
    if not os.path.isfile(args.reference):
        raise FileNotFoundError(f"Reference FASTA file not found: {args.reference}")
    if not os.path.isdir(args.genome_dir):
        raise FileNotFoundError(f"Genome directory not found: {args.genome_dir}")
    if args.id_file and not os.path.isfile(args.id_file):
        raise FileNotFoundError(f"Genome ID file not found: {args.id_file}")


def main(argv=None):
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    # Set up logging
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        validate_inputs(args)

        # Load configuration
        config = load_config(config_path=args.config, use_env=True)

        # Override config with command line arguments
        if args.min_subject is not None:
            config.min_subject_coverage_pct = args.min_subject
        if args.max_e is not None:
            config.max_e_value = args.max_e
        if args.batch_size is not None:
            config.batch_size = args.batch_size
        if args.report_format is not None:
            config.report_format = args.report_format
        if args.on_search_error is not None:
            config.on_search_error = args.on_search_error
        if args.workers is not None:
            config.parallel_workers = args.workers

        # Re-validate after CLI overrides.
        config.validate()

        from rna_check_pipeline import RnaCheckPipeline
        from rna_check_pipeline.adapters import (
            DirectoryGenomeSource, create_reporter, create_search_engine, read_id_file
        )

        logger.info(f"Connecting to BLAST database at {args.reference}.")
        engine = create_search_engine(args.reference, config)

        logger.info(f"Loading genomes at {args.genome_dir}.")
        genome_ids = read_id_file(args.id_file) if args.id_file else None
        genomes = DirectoryGenomeSource(args.genome_dir, genome_ids)

        logger.info(f"Min subject coverage: {config.min_subject_coverage_pct}%")
        logger.info(f"Max e-value: {config.max_e_value}")

        with ExitStack() as stack:
            stream = stack.enter_context(open(args.output, 'w')) if args.output else sys.stdout
            sink = create_reporter(config.report_format, stream)
            pipeline = RnaCheckPipeline(config, engine, sink)
            success = pipeline.run(genomes, output_dir=args.output_dir)

        if success:
            logger.info("Pipeline completed successfully!")
            return 0
        else:
            logger.error("Pipeline failed!")
            return 1

    except FileNotFoundError as e:
        logger.error(f"File error: {e}")
        return 1
    except PipelineError as e:
        logger.error(f"Pipeline error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
