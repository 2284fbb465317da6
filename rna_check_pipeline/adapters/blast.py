#!/usr/bin/env python3

"""
Homology search engine backed by NCBI BLAST+.

Builds (or reuses) a nucleotide BLAST database from a reference RNA FASTA
file such as SILVA NR99 SSU, and searches batches of contigs against it with
``blastn`` in tabular output mode.
"""

import logging
import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

from ..core.data_structures import Contig, GenomicInterval, SearchHit, FORWARD, REVERSE
from ..core.exceptions import ParseError, SearchError, ValidationError
from ..core.interfaces import SearchParameters

OUTFMT_FIELDS = ("qseqid", "qstart", "qend", "sseqid", "sstart", "send",
                 "slen", "evalue", "stitle")
DB_SUFFIXES = (".nhr", ".nin", ".nsq")


def _oriented(contig: str, a: int, b: int) -> GenomicInterval:
    """Interval from BLAST begin/end coordinates; begin > end means minus strand."""
    if a <= b:
        return GenomicInterval(contig, a, b, FORWARD)
    return GenomicInterval(contig, b, a, REVERSE)


def parse_tabular(lines: Iterable[str], source: str = "blastn") -> List[SearchHit]:
    """
    Parse ``-outfmt 6`` lines produced with OUTFMT_FIELDS.

    Args:
        lines: Output lines from blastn
        source: Name used in error messages

    Returns:
        Hits in output order
    """
    hits = []
    for line_num, line in enumerate(lines, 1):
        line = line.rstrip('\n')
        if not line or line.startswith('#'):
            continue
        parts = line.split('\t')
        if len(parts) < len(OUTFMT_FIELDS) - 1:
            raise ParseError(f"Expected {len(OUTFMT_FIELDS)} columns, found {len(parts)}",
                             source, line_num)
        qseqid, qstart, qend, sseqid, sstart, send, slen, evalue = parts[:8]
        stitle = parts[8] if len(parts) > 8 else sseqid
        try:
            query = _oriented(qseqid, int(qstart), int(qend))
            subject = _oriented(sseqid, int(sstart), int(send))
            subject_len = int(slen)
            e_value = float(evalue)
        except (ValueError, ValidationError) as e:
            raise ParseError(f"Bad hit record: {e}", source, line_num)

        # Coverage is the aligned subject span over the subject length
        coverage = subject.length * 100.0 / subject_len if subject_len > 0 else 0.0
        if stitle.startswith(sseqid):
            stitle = stitle[len(sseqid):].strip() or sseqid
        hits.append(SearchHit(query_location=query, subject_location=subject,
                              subject_def=stitle, e_value=e_value,
                              pct_subject_coverage=coverage))
    return hits


def write_fasta(contigs: Sequence[Contig], handle, line_width: int = 60) -> None:
    """Write contigs as FASTA records."""
    for contig in contigs:
        handle.write(f">{contig.id}\n")
        sequence = contig.sequence
        for i in range(0, len(sequence), line_width):
            handle.write(sequence[i:i + line_width] + "\n")


@dataclass
class BlastOptions:
    """Command-line settings for blastn."""
    db_path: str
    exe: str = "blastn"
    threads: int = 1
    word_size: int = 11
    max_target_seqs: int = 500
    extra_args: Sequence[str] = field(default_factory=tuple)

    def build_cmd(self, query_fasta: str, parameters: SearchParameters) -> List[str]:
        cmd = [self.exe, "-db", self.db_path, "-query", query_fasta,
               "-evalue", str(parameters.max_e_value),
               "-word_size", str(self.word_size),
               "-num_threads", str(self.threads),
               "-max_target_seqs", str(self.max_target_seqs),
               "-outfmt", "6 " + " ".join(OUTFMT_FIELDS)]
        cmd.extend(self.extra_args)
        return cmd


class BlastDatabase:
    """A nucleotide BLAST database searched with blastn."""

    def __init__(self, options: BlastOptions):
        self.options = options

    @classmethod
    def create_or_load(cls, fasta_path: str, word_size: int = 11, threads: int = 1,
                       exe: str = "blastn", makeblastdb: str = "makeblastdb") -> 'BlastDatabase':
        """
        Use the BLAST database next to a FASTA file, building it if missing or stale.

        Args:
            fasta_path: Reference nucleotide FASTA file; also the database prefix
            word_size: blastn word size
            threads: blastn thread count
            exe: blastn executable
            makeblastdb: makeblastdb executable
        """
        if not os.path.isfile(fasta_path):
            raise FileNotFoundError(f"Reference FASTA not found: {fasta_path}")

        if cls._needs_build(fasta_path):
            logging.info(f"Creating BLAST database for {fasta_path}.")
            cmd = [makeblastdb, "-in", fasta_path, "-dbtype", "nucl", "-out", fasta_path]
            try:
                subprocess.run(cmd, check=True, capture_output=True, text=True)
            except FileNotFoundError:
                raise SearchError(f"Executable {makeblastdb!r} not found on PATH")
            except UnicodeDecodeError as e:
                raise SearchError(f"Undecodable {makeblastdb} output: {e}")
            except subprocess.CalledProcessError as e:
                raise SearchError(f"makeblastdb failed (exit {e.returncode}): {e.stderr.strip()}")
        else:
            logging.info(f"Using existing BLAST database for {fasta_path}.")

        return cls(BlastOptions(db_path=fasta_path, exe=exe, threads=threads, word_size=word_size))

    @staticmethod
    def _needs_build(prefix: str) -> bool:
        db_files = [prefix + suffix for suffix in DB_SUFFIXES]
        if not all(os.path.isfile(f) for f in db_files):
            return True
        source_time = os.path.getmtime(prefix)
        return any(os.path.getmtime(f) < source_time for f in db_files)

    def search(self, contigs: Sequence[Contig], parameters: SearchParameters) -> List[SearchHit]:
        """Search contigs against the database, keeping hits that pass the parameters."""
        if not contigs:
            return []
        if not shutil.which(self.options.exe):
            raise SearchError(f"Executable {self.options.exe!r} not found on PATH")

        with tempfile.NamedTemporaryFile('w', suffix='.fna', delete=False) as query:
            write_fasta(contigs, query)
            query_path = query.name
        try:
            cmd = self.options.build_cmd(query_path, parameters)
            logging.debug(f"Running: {' '.join(cmd)}")
            result = subprocess.run(cmd, capture_output=True, text=True)
        except UnicodeDecodeError as e:
            raise SearchError(f"Undecodable {self.options.exe} output: {e}")
        finally:
            os.unlink(query_path)

        if result.returncode != 0:
            tail = "\n".join(result.stderr.strip().splitlines()[-20:])
            raise SearchError(f"{self.options.exe} failed (exit {result.returncode}): {tail}")

        try:
            hits = parse_tabular(result.stdout.splitlines(), source=self.options.exe)
        except ParseError as e:
            raise SearchError(f"Unreadable {self.options.exe} output: {e}")
        return [hit for hit in hits if parameters.accepts(hit)]


def create_search_engine(reference_fasta: str, config) -> BlastDatabase:
    """Create the BLAST search engine described by a pipeline configuration."""
    return BlastDatabase.create_or_load(reference_fasta, word_size=config.word_size,
                                        threads=config.blast_threads, exe=config.blast_program)
