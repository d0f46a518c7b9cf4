"""Tests for config module."""

import pytest
from consensus.config import (DEFAULT_CONFIG, ConsensusConfig, MultiConsensusConfig,
                              ParallelConfig, load_config)
from consensus.errors import ConfigurationError
from consensus.search.ransac import RANSAC


class TestConfig:
    """Test configuration module."""

    def test_default_config_exists(self):
        """Test that default config exists."""
        assert DEFAULT_CONFIG is not None
        assert isinstance(DEFAULT_CONFIG, dict)

    def test_consensus_config(self):
        """Test consensus configuration."""
        assert 'consensus' in DEFAULT_CONFIG
        section = DEFAULT_CONFIG['consensus']

        assert 'inlier_threshold' in section
        assert 'confidence' in section
        assert 'max_trials' in section
        assert 'time_budget' in section

    def test_multi_consensus_config(self):
        """Test multi-consensus configuration."""
        assert 'multi_consensus' in DEFAULT_CONFIG
        section = DEFAULT_CONFIG['multi_consensus']

        assert 'max_models' in section
        assert 'min_model_support' in section

    def test_config_values_valid(self):
        """Test that config values are sensible."""
        assert 0 < DEFAULT_CONFIG['consensus']['confidence'] < 1
        assert DEFAULT_CONFIG['consensus']['inlier_threshold'] > 0
        assert DEFAULT_CONFIG['consensus']['max_trials'] > 0
        assert DEFAULT_CONFIG['parallel']['workers'] >= 1

    def test_defaults_build_dataclasses(self):
        """Test every section of the defaults is accepted."""
        assert ConsensusConfig.from_dict(DEFAULT_CONFIG) == ConsensusConfig()
        assert MultiConsensusConfig.from_dict(DEFAULT_CONFIG) == MultiConsensusConfig()
        assert ParallelConfig.from_dict(DEFAULT_CONFIG) == ParallelConfig()


class TestValidation:
    """Test rejected configurations."""

    @pytest.mark.parametrize('kwargs', [
        {'confidence': 0.0},
        {'confidence': 1.0},
        {'inlier_threshold': -1.0},
        {'max_trials': 0},
        {'min_inliers': -1},
        {'time_budget': 0},
        {'precision': 'float16'},
    ])
    def test_invalid_consensus_config(self, kwargs):
        with pytest.raises(ConfigurationError):
            ConsensusConfig(**kwargs)

    def test_invalid_multi_config(self):
        with pytest.raises(ValueError):
            MultiConsensusConfig(max_models=0)
        with pytest.raises(ValueError):
            MultiConsensusConfig(min_model_support=0)

    def test_invalid_parallel_config(self):
        with pytest.raises(ConfigurationError):
            ParallelConfig(workers=0)

    def test_unknown_keys(self):
        """Test misspelled keys are reported."""
        with pytest.raises(ConfigurationError):
            ConsensusConfig.from_dict({'consensus': {'treshold': 1.0}})


class TestLoadConfig:
    """Test YAML loading."""

    def test_defaults_without_path(self):
        config = load_config()
        assert config == DEFAULT_CONFIG
        assert config is not DEFAULT_CONFIG

    def test_yaml_overrides_merge(self, tmp_path):
        """Test file values override defaults section by section."""
        path = tmp_path / 'consensus.yaml'
        path.write_text(
            "consensus:\n"
            "  inlier_threshold: 0.25\n"
            "  max_trials: 200\n"
            "parallel:\n"
            "  workers: 2\n"
        )
        config = load_config(path)

        assert config['consensus']['inlier_threshold'] == 0.25
        assert config['consensus']['max_trials'] == 200
        assert config['consensus']['confidence'] == 0.99
        assert config['parallel']['workers'] == 2
        assert DEFAULT_CONFIG['consensus']['max_trials'] == 1000

        ransac = RANSAC.from_config(config, seed=0)
        assert ransac.config.inlier_threshold == 0.25
        assert ransac.config.max_trials == 200

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'empty.yaml'
        path.write_text("")
        assert load_config(path) == DEFAULT_CONFIG

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / 'list.yaml'
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError):
            load_config(path)
