#!/usr/bin/env python3

"""
Genome source reading a directory of FASTA + GFF3 genome pairs.

Each genome is a nucleotide FASTA file (``<genome_id>.fna``, ``.fa`` or
``.fasta``) with an optional GFF3 annotation file of the same stem
(``<genome_id>.gff`` or ``.gff3``). Genomes are loaded lazily, one at a time.
"""

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple
from urllib.parse import unquote

import pyfaidx

from ..core.data_structures import Contig, Feature, Genome, GenomicInterval, STRANDS
from ..core.exceptions import GenomeError, ParseError, ValidationError
from ..core.ordering import natural_key

FASTA_SUFFIXES = ('.fna', '.fa', '.fasta')
GFF_SUFFIXES = ('.gff', '.gff3')
NAME_PRAGMA = '#!genome-name'


def read_id_file(file_path: str) -> List[str]:
    """Read genome IDs from the first column of a text file, skipping headers and comments."""
    ids = []
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            first = True
            for line in f:
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                genome_id = line.split('\t')[0]
                is_header = first and genome_id == 'genome_id'
                first = False
                if not is_header:
                    ids.append(genome_id)
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"Cannot read genome ID file: {e}", file_path)
    return ids


class GffFeatureParser:
    """Parse a GFF3 file into features and the genome name pragma."""

    def __init__(self, file_path: str, genome_id: str):
        self.file_path = file_path
        self.genome_id = genome_id
        self.genome_name = ""
        self.features: Dict[str, Feature] = {}
        self._segments: Dict[str, List[Tuple[str, int, int, str]]] = {}

    def parse(self) -> Tuple[List[Feature], str]:
        """Parse the file. Returns the features in file order and the genome name."""
        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                for line_num, line in enumerate(f, 1):
                    line = line.rstrip('\n')
                    if line.startswith(NAME_PRAGMA):
                        self.genome_name = line[len(NAME_PRAGMA):].strip()
                        continue
                    if line.startswith('##FASTA'):
                        break
                    if not line.strip() or line.startswith('#'):
                        continue
                    self._parse_line(line, line_num)
        except (OSError, UnicodeDecodeError) as e:
            raise ParseError(f"Failed to read GFF3 file: {e}", self.file_path)

        for feature_id, segments in self._segments.items():
            self.features[feature_id].location = self._combine_segments(feature_id, segments)

        return list(self.features.values()), self.genome_name

    def _parse_line(self, line: str, line_num: int) -> None:
        parts = line.split('\t')
        if len(parts) != 9:
            logging.warning(f"Skipping malformed GFF3 line {line_num} in {self.file_path}")
            return

        contig, _source, feature_type, start, end, _score, strand, _phase, attributes = parts
        attr_dict = self._parse_gff3_attributes(attributes)
        feature_id = attr_dict.get('ID') or f"{self.genome_id}.{feature_type}.{line_num}"

        if feature_id not in self.features:
            function = attr_dict.get('product') or attr_dict.get('Name', '')
            self.features[feature_id] = Feature(id=feature_id, type=feature_type, function=function)
            self._segments[feature_id] = []

        try:
            self._segments[feature_id].append((contig, int(start), int(end), strand))
        except ValueError:
            logging.warning(f"Bad coordinates for {feature_id} at line {line_num} in {self.file_path}")
            self._segments[feature_id].append((contig, 0, 0, '?'))

    def _combine_segments(self, feature_id: str,
                          segments: List[Tuple[str, int, int, str]]) -> Optional[GenomicInterval]:
        """Span all segments of a feature, or None if they are missing or disagree."""
        contigs = {segment[0] for segment in segments}
        strands = {segment[3] for segment in segments}
        if len(contigs) != 1 or len(strands) != 1:
            logging.debug(f"Feature {feature_id} spans several contigs or strands")
            return None
        strand = strands.pop()
        if strand not in STRANDS:
            return None
        try:
            return GenomicInterval(contig=contigs.pop(),
                                   start=min(s[1] for s in segments),
                                   end=max(s[2] for s in segments),
                                   strand=strand)
        except ValidationError as e:
            logging.debug(f"Feature {feature_id} has an invalid location: {e}")
            return None

    def _parse_gff3_attributes(self, attr_string: str) -> Dict[str, str]:
        """Parse GFF3 attributes string."""
        attributes = {}
        for attr in attr_string.split(';'):
            if '=' in attr:
                key, value = attr.split('=', 1)
                attributes[key.strip()] = unquote(value)
        return attributes


class DirectoryGenomeSource:
    """Genomes stored as FASTA/GFF3 file pairs in one directory."""

    def __init__(self, directory: str, genome_ids: Optional[List[str]] = None):
        self.directory = Path(directory)
        if not self.directory.is_dir():
            raise GenomeError(f"Genome directory not found: {directory}")

        self.fasta_files: Dict[str, Path] = {}
        for path in self.directory.iterdir():
            if path.suffix.lower() in FASTA_SUFFIXES:
                self.fasta_files[path.stem] = path

        if genome_ids is None:
            self.genome_ids = sorted(self.fasta_files, key=natural_key)
        else:
            missing = [g for g in genome_ids if g not in self.fasta_files]
            if missing:
                raise GenomeError(f"{len(missing)} requested genomes not found in {directory}",
                                  genome_id=missing[0])
            self.genome_ids = list(genome_ids)

        logging.info(f"{len(self.genome_ids)} genomes found in {directory}.")

    def __len__(self) -> int:
        return len(self.genome_ids)

    def __iter__(self) -> Iterator[Genome]:
        for genome_id in self.genome_ids:
            yield self.load_genome(genome_id)

    def _find_gff(self, genome_id: str) -> Optional[Path]:
        for suffix in GFF_SUFFIXES:
            candidate = self.directory / f"{genome_id}{suffix}"
            if candidate.exists():
                return candidate
        return None

    def load_genome(self, genome_id: str) -> Genome:
        """Load the contigs and features of one genome."""
        if genome_id not in self.fasta_files:
            raise GenomeError("Genome not found", genome_id=genome_id)

        contigs = self._load_contigs(genome_id, self.fasta_files[genome_id])

        features: List[Feature] = []
        name = ""
        gff_path = self._find_gff(genome_id)
        if gff_path is None:
            logging.warning(f"No GFF3 annotation for genome {genome_id}; annotation scan will be empty")
        else:
            features, name = GffFeatureParser(str(gff_path), genome_id).parse()

        return Genome(id=genome_id, name=name, contigs=contigs, features=features)

    def _load_contigs(self, genome_id: str, fasta_path: Path) -> List[Contig]:
        try:
            with pyfaidx.Fasta(str(fasta_path), as_raw=True, sequence_always_upper=True) as fasta:
                return [Contig(id=name, sequence=fasta[name][:]) for name in fasta.keys()]
        except (pyfaidx.FastaIndexingError, OSError, UnicodeDecodeError) as e:
            raise GenomeError(f"Failed to read FASTA {fasta_path}: {e}", genome_id=genome_id)
