#!/usr/bin/env python3

"""
Unit tests for configuration management.

Tests the configuration loading, validation, and environment
variable handling functionality.
"""

import unittest
import tempfile
import os
import json
import sys

import yaml

# Add the parent directory to the path to import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from rna_check_pipeline.core.config import PipelineConfig, load_config
from rna_check_pipeline.core.exceptions import ConfigurationError


class EnvironmentMixin:
    """Set environment variables for one test and restore them afterwards."""

    def set_env(self, env_vars):
        for key, value in env_vars.items():
            original = os.environ.get(key)
            self.addCleanup(self._restore, key, original)
            os.environ[key] = value

    @staticmethod
    def _restore(key, value):
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value


class TestPipelineConfig(EnvironmentMixin, unittest.TestCase):
    """Test PipelineConfig class."""

    def test_default_config(self):
        """Test default configuration values."""
        config = PipelineConfig()

        self.assertEqual(config.batch_size, 20)
        self.assertEqual(config.min_subject_coverage_pct, 95.0)
        self.assertEqual(config.max_e_value, 1e-10)
        self.assertEqual(config.on_search_error, "abort")
        self.assertEqual(config.rna_feature_types, ["rna", "rRNA"])
        self.assertEqual(config.memory_limit_mb, 4096)
        self.assertTrue(config.enable_memory_monitoring)
        self.assertFalse(config.use_interval_index)
        self.assertEqual(config.parallel_workers, 1)
        self.assertEqual(config.report_format, "list")
        self.assertFalse(config.debug_mode)

    def test_config_validation(self):
        """Test configuration validation."""
        PipelineConfig().validate()

        invalid = [
            {"batch_size": 0},
            {"min_subject_coverage_pct": -1.0},
            {"min_subject_coverage_pct": 100.5},
            {"max_e_value": -1e-5},
            {"on_search_error": "retry"},
            {"parallel_workers": 0},
            {"blast_threads": 0},
            {"word_size": 3},
            {"memory_limit_mb": 50},
            {"rna_feature_types": []},
            {"ssu_pattern": "16S(rRNA"},
        ]
        for kwargs in invalid:
            with self.assertRaises(ConfigurationError, msg=str(kwargs)):
                PipelineConfig(**kwargs)

    def test_coverage_bounds_inclusive(self):
        self.assertEqual(PipelineConfig(min_subject_coverage_pct=0).min_subject_coverage_pct, 0)
        self.assertEqual(PipelineConfig(min_subject_coverage_pct=100).min_subject_coverage_pct, 100)

    def test_config_from_dict(self):
        """Test creating config from dictionary."""
        config = PipelineConfig.from_dict({
            "batch_size": 5,
            "max_e_value": 1e-20,
            "on_search_error": "skip_genome",
            "debug_mode": True,
            "unknown_key": "ignored"
        })

        self.assertEqual(config.batch_size, 5)
        self.assertEqual(config.max_e_value, 1e-20)
        self.assertEqual(config.on_search_error, "skip_genome")
        self.assertTrue(config.debug_mode)
        # Default values for unspecified parameters
        self.assertEqual(config.min_subject_coverage_pct, 95.0)

    def test_config_to_dict(self):
        config_dict = PipelineConfig(batch_size=7).to_dict()
        self.assertEqual(config_dict["batch_size"], 7)
        self.assertIn("ssu_pattern", config_dict)

    def test_config_from_json_file(self):
        """Test loading config from JSON file."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            json.dump({"batch_size": 10, "parallel_workers": 4}, f)
            config_path = f.name

        try:
            config = PipelineConfig.from_file(config_path)
            self.assertEqual(config.batch_size, 10)
            self.assertEqual(config.parallel_workers, 4)
            self.assertEqual(config.max_e_value, 1e-10)
        finally:
            os.unlink(config_path)

    def test_config_from_yaml_file(self):
        """Test loading config from YAML file."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            yaml.safe_dump({"min_subject_coverage_pct": 90.0,
                            "rna_feature_types": ["rRNA"],
                            "use_interval_index": True}, f)
            config_path = f.name

        try:
            config = PipelineConfig.from_file(config_path)
            self.assertEqual(config.min_subject_coverage_pct, 90.0)
            self.assertEqual(config.rna_feature_types, ["rRNA"])
            self.assertTrue(config.use_interval_index)
        finally:
            os.unlink(config_path)

    def test_config_from_nonexistent_file(self):
        with self.assertRaises(ConfigurationError):
            PipelineConfig.from_file("/nonexistent/config.json")

    def test_config_from_invalid_json(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            f.write("{ invalid json }")
            config_path = f.name

        try:
            with self.assertRaises(ConfigurationError):
                PipelineConfig.from_file(config_path)
        finally:
            os.unlink(config_path)

    def test_config_file_must_hold_mapping(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yml', delete=False) as f:
            f.write("- batch_size\n- 5\n")
            config_path = f.name

        try:
            with self.assertRaises(ConfigurationError):
                PipelineConfig.from_file(config_path)
        finally:
            os.unlink(config_path)

    def test_config_save_to_file(self):
        """Test saving config to JSON and YAML files."""
        config = PipelineConfig(batch_size=3, on_search_error="skip_batch")

        with tempfile.TemporaryDirectory() as temp_dir:
            for name in ("config.json", "config.yaml"):
                config_path = os.path.join(temp_dir, name)
                config.save_to_file(config_path)
                loaded_config = PipelineConfig.from_file(config_path)
                self.assertEqual(loaded_config.batch_size, 3)
                self.assertEqual(loaded_config.on_search_error, "skip_batch")

    def test_config_from_env(self):
        """Test loading config from environment variables."""
        self.set_env({
            'RNACHECK_BATCH_SIZE': '5',
            'RNACHECK_MIN_SUBJECT_COVERAGE': '80.5',
            'RNACHECK_MAX_E_VALUE': '1e-5',
            'RNACHECK_ON_SEARCH_ERROR': 'skip_batch',
            'RNACHECK_DEBUG_MODE': 'true'
        })

        config = PipelineConfig.from_env()

        self.assertEqual(config.batch_size, 5)
        self.assertEqual(config.min_subject_coverage_pct, 80.5)
        self.assertEqual(config.max_e_value, 1e-5)
        self.assertEqual(config.on_search_error, 'skip_batch')
        self.assertTrue(config.debug_mode)
        self.assertEqual(config.parallel_workers, 1)

    def test_config_from_env_invalid_values(self):
        """Test error handling for invalid environment values."""
        self.set_env({'RNACHECK_BATCH_SIZE': 'twenty'})
        with self.assertRaises(ConfigurationError):
            PipelineConfig.from_env()

    def test_config_from_env_invalid_policy(self):
        self.set_env({'RNACHECK_ON_SEARCH_ERROR': 'ignore'})
        with self.assertRaises(ConfigurationError):
            PipelineConfig.from_env()


class TestLoadConfig(EnvironmentMixin, unittest.TestCase):
    """Test the load_config function."""

    def test_load_defaults(self):
        config = load_config(use_env=False)
        self.assertEqual(config.batch_size, 20)

    def test_env_overrides_defaults(self):
        self.set_env({'RNACHECK_PARALLEL_WORKERS': '3'})
        self.assertEqual(load_config().parallel_workers, 3)
        self.assertEqual(load_config(use_env=False).parallel_workers, 1)

    def test_file_overrides_env(self):
        """File settings win over the environment, which wins over defaults."""
        self.set_env({'RNACHECK_BATCH_SIZE': '5', 'RNACHECK_PARALLEL_WORKERS': '3'})

        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            json.dump({"batch_size": 50}, f)
            config_path = f.name

        try:
            config = load_config(config_path)
            self.assertEqual(config.batch_size, 50)
            self.assertEqual(config.parallel_workers, 3)
            self.assertEqual(config.max_e_value, 1e-10)
        finally:
            os.unlink(config_path)


if __name__ == "__main__":
    unittest.main()
