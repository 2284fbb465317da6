#!/usr/bin/env python3

"""
Configuration management for the SSU rRNA check pipeline.

Centralized configuration with support for file-based configuration
and environment variable overrides.
"""

import os
import json
import re
from dataclasses import dataclass, asdict, field
from typing import Optional, Dict, Any, List

import yaml

from .exceptions import ConfigurationError
from .processors import SSU_RRNA_PATTERN, DEFAULT_RNA_TYPES

SEARCH_ERROR_POLICIES = ('abort', 'skip_batch', 'skip_genome')


def _is_yaml(path: str) -> bool:
    return path.lower().endswith(('.yaml', '.yml'))


def _read_config_file(config_path: str) -> Dict[str, Any]:
    if not os.path.exists(config_path):
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r') as f:
            if _is_yaml(config_path):
                config_data = yaml.safe_load(f)
            else:
                config_data = json.load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Invalid configuration file format: {e}")
    except OSError as e:
        raise ConfigurationError(f"Error loading configuration: {e}")

    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")
    return config_data


@dataclass
class PipelineConfig:
    """Centralized configuration for the SSU rRNA check pipeline."""

    # Homology search
    batch_size: int = 20
    min_subject_coverage_pct: float = 95.0
    max_e_value: float = 1e-10
    blast_program: str = "blastn"
    blast_threads: int = 1
    word_size: int = 11

    # Annotation scan
    ssu_pattern: str = SSU_RRNA_PATTERN
    rna_feature_types: List[str] = field(default_factory=lambda: list(DEFAULT_RNA_TYPES))

    # Failure handling: abort, skip_batch or skip_genome
    on_search_error: str = "abort"

    # Performance settings
    use_interval_index: bool = False
    parallel_workers: int = 1
    memory_limit_mb: int = 4096
    enable_memory_monitoring: bool = True

    # Output settings
    report_format: str = "list"
    debug_mode: bool = False

    @classmethod
    def from_file(cls, config_path: str) -> 'PipelineConfig':
        """Load configuration from file (JSON or YAML)."""
        return cls.from_dict(_read_config_file(config_path))

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'PipelineConfig':
        """Create configuration from dictionary."""
        # Filter out unknown keys
        known_keys = set(cls.__dataclass_fields__.keys())
        filtered_dict = {k: v for k, v in config_dict.items() if k in known_keys}

        try:
            return cls(**filtered_dict)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration parameters: {e}")

    @classmethod
    def from_env(cls) -> 'PipelineConfig':
        """Load configuration from environment variables."""
        config = cls()

        # Map environment variables to config fields
        env_mappings = {
            'RNACHECK_BATCH_SIZE': ('batch_size', int),
            'RNACHECK_MIN_SUBJECT_COVERAGE': ('min_subject_coverage_pct', float),
            'RNACHECK_MAX_E_VALUE': ('max_e_value', float),
            'RNACHECK_ON_SEARCH_ERROR': ('on_search_error', str),
            'RNACHECK_PARALLEL_WORKERS': ('parallel_workers', int),
            'RNACHECK_BLAST_THREADS': ('blast_threads', int),
            'RNACHECK_MEMORY_LIMIT_MB': ('memory_limit_mb', int),
            'RNACHECK_DEBUG_MODE': ('debug_mode', lambda x: x.lower() in ('true', '1', 'yes')),
        }

        for env_var, (field_name, converter) in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value:
                try:
                    setattr(config, field_name, converter(env_value))
                except (ValueError, TypeError) as e:
                    raise ConfigurationError(f"Invalid environment variable {env_var}: {e}")

        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def save_to_file(self, config_path: str) -> None:
        """Save configuration to file."""
        config_dict = self.to_dict()

        try:
            with open(config_path, 'w') as f:
                if _is_yaml(config_path):
                    yaml.safe_dump(config_dict, f, default_flow_style=False)
                else:
                    json.dump(config_dict, f, indent=2)
        except OSError as e:
            raise ConfigurationError(f"Error saving configuration: {e}")

    def validate(self) -> None:
        """Validate configuration parameters."""
        if self.batch_size < 1:
            raise ConfigurationError("batch_size must be >= 1")

        if not 0 <= self.min_subject_coverage_pct <= 100:
            raise ConfigurationError("min_subject_coverage_pct must be between 0 and 100 (inclusive)")

        if self.max_e_value < 0:
            raise ConfigurationError("max_e_value cannot be negative")

        if self.on_search_error not in SEARCH_ERROR_POLICIES:
            raise ConfigurationError(f"on_search_error must be one of {', '.join(SEARCH_ERROR_POLICIES)}")

        if self.parallel_workers < 1:
            raise ConfigurationError("parallel_workers must be >= 1")

        if self.blast_threads < 1:
            raise ConfigurationError("blast_threads must be >= 1")

        if self.word_size < 4:
            raise ConfigurationError("word_size must be >= 4")

        if self.memory_limit_mb < 100:
            raise ConfigurationError("memory_limit_mb must be >= 100")

        if not self.rna_feature_types:
            raise ConfigurationError("rna_feature_types cannot be empty")

        try:
            re.compile(self.ssu_pattern)
        except re.error as e:
            raise ConfigurationError(f"Invalid ssu_pattern: {e}")

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.validate()


def load_config(config_path: Optional[str] = None,
                use_env: bool = True) -> PipelineConfig:
    """
    Load configuration with priority: file > environment > defaults.

    Args:
        config_path: Path to configuration file (optional)
        use_env: Whether to load environment variables

    Returns:
        PipelineConfig: Loaded configuration
    """
    config = PipelineConfig()

    if use_env:
        env_config = PipelineConfig.from_env()
        for field_name in PipelineConfig.__dataclass_fields__.keys():
            env_value = getattr(env_config, field_name)
            if env_value != getattr(config, field_name):
                setattr(config, field_name, env_value)

    if config_path:
        # Only keys present in the file override the environment
        overrides = {k: v for k, v in _read_config_file(config_path).items()
                     if k in PipelineConfig.__dataclass_fields__}
        config = PipelineConfig.from_dict({**config.to_dict(), **overrides})

    return config
