#!/usr/bin/env python3

"""
Custom exceptions for the SSU rRNA check pipeline.

Provides specific exception types for better error handling and debugging.
"""

class PipelineError(Exception):
    """Base exception for all pipeline-related errors."""
    pass


class ParseError(PipelineError):
    """Error occurred during input file parsing."""

    def __init__(self, message: str, filename: str = "", line_number: int = 0):
        super().__init__(message)
        self.filename = filename
        self.line_number = line_number

    def __str__(self):
        if self.filename and self.line_number:
            return f"Parse error in {self.filename} at line {self.line_number}: {super().__str__()}"
        elif self.filename:
            return f"Parse error in {self.filename}: {super().__str__()}"
        return super().__str__()


class ValidationError(PipelineError):
    """Malformed interval or locus descriptor."""

    def __init__(self, message: str, contig: str = "", genome_id: str = ""):
        super().__init__(message)
        self.contig = contig
        self.genome_id = genome_id

    def __str__(self):
        if self.genome_id and self.contig:
            return f"Validation error in genome {self.genome_id} on {self.contig}: {super().__str__()}"
        elif self.contig:
            return f"Validation error on {self.contig}: {super().__str__()}"
        elif self.genome_id:
            return f"Validation error in genome {self.genome_id}: {super().__str__()}"
        return super().__str__()


class MergeError(PipelineError):
    """A merge was attempted across genomes, strands or evidence types."""
    pass


class SearchError(PipelineError):
    """The homology search engine failed on a batch of contigs."""

    def __init__(self, message: str, genome_id: str = "", batch_index: int = -1):
        super().__init__(message)
        self.genome_id = genome_id
        self.batch_index = batch_index

    def __str__(self):
        if self.genome_id and self.batch_index >= 0:
            return f"Search error in genome {self.genome_id} batch {self.batch_index}: {super().__str__()}"
        elif self.genome_id:
            return f"Search error in genome {self.genome_id}: {super().__str__()}"
        return super().__str__()


class SessionStateError(PipelineError):
    """Illegal reconciliation session transition."""

    def __init__(self, message: str, state: str = ""):
        super().__init__(message)
        self.state = state

    def __str__(self):
        if self.state:
            return f"{super().__str__()} (session state: {self.state})"
        return super().__str__()


class ConfigurationError(PipelineError):
    """Error in pipeline configuration."""
    pass


class MemoryError(PipelineError):
    """Memory usage exceeded limits."""

    def __init__(self, message: str, current_usage: float, limit: float):
        super().__init__(message)
        self.current_usage = current_usage
        self.limit = limit

    def __str__(self):
        return f"Memory error: {super().__str__()} (current: {self.current_usage:.1f}MB, limit: {self.limit:.1f}MB)"


class GenomeError(PipelineError):
    """Error accessing a genome in the genome source."""

    def __init__(self, message: str, genome_id: str = "", contig: str = ""):
        super().__init__(message)
        self.genome_id = genome_id
        self.contig = contig

    def __str__(self):
        if self.genome_id and self.contig:
            return f"Genome error at {self.genome_id}:{self.contig}: {super().__str__()}"
        elif self.genome_id:
            return f"Genome error at {self.genome_id}: {super().__str__()}"
        return super().__str__()
