"""
Tests for the configuration.

These tests verify:
    - Default game and training values
    - Hyperparameter control bounds
    - Validation of impossible settings
"""

import pytest
import torch

from config import Config


class TestDefaults:
    """Test default values."""

    def test_table_geometry(self):
        cfg = Config()
        assert (cfg.SCREEN_WIDTH, cfg.SCREEN_HEIGHT) == (600, 400)
        assert (cfg.PADDLE_WIDTH, cfg.PADDLE_HEIGHT) == (10, 60)
        assert cfg.BALL_SIZE == 10
        assert cfg.PADDLE_SPEED == 6
        assert cfg.BALL_SPEED == 5

    def test_network_shape(self):
        cfg = Config()
        assert cfg.STATE_SIZE == 6
        assert cfg.ACTION_SIZE == 3
        assert cfg.HIDDEN_LAYERS == [32, 32]

    def test_training_defaults(self):
        cfg = Config()
        assert cfg.EPSILON == 0.1
        assert cfg.LEARNING_RATE == 0.001
        assert cfg.GAMMA == 0.95
        assert cfg.TRAINING_SPEED == 1
        assert cfg.BATCH_SIZE == 32
        assert cfg.MEMORY_SIZE == 2000
        assert cfg.TARGET_UPDATE == 10

    def test_rewards(self):
        cfg = Config()
        assert cfg.REWARD_HUMAN_RETURN == -1
        assert cfg.REWARD_AGENT_RETURN == 10
        assert cfg.REWARD_AGENT_SCORES == 20
        assert cfg.REWARD_HUMAN_SCORES == -20

    def test_hidden_layers_not_shared(self):
        a, b = Config(), Config()
        a.HIDDEN_LAYERS.append(8)
        assert b.HIDDEN_LAYERS == [32, 32]

    def test_force_cpu_device(self):
        assert Config(FORCE_CPU=True).DEVICE == torch.device('cpu')


class TestBounds:
    """Test the live control ranges."""

    def test_keys(self):
        assert set(Config().hyperparam_bounds()) == {'epsilon', 'alpha', 'gamma', 'training_speed'}

    def test_defaults_inside_bounds(self):
        cfg = Config()
        bounds = cfg.hyperparam_bounds()
        for name, value in [('epsilon', cfg.EPSILON), ('alpha', cfg.LEARNING_RATE),
                            ('gamma', cfg.GAMMA), ('training_speed', cfg.TRAINING_SPEED)]:
            low, high, _ = bounds[name]
            assert low <= value <= high

    def test_training_speed_range(self):
        assert Config().TRAINING_SPEED_RANGE == (1, 5, 1)


class TestValidation:
    """Test that impossible settings are rejected."""

    @pytest.mark.parametrize("overrides", [
        {'LEARNING_RATE': 0.0},
        {'GAMMA': 1.5},
        {'EPSILON': -0.1},
        {'BATCH_SIZE': 0},
        {'MEMORY_SIZE': 16, 'BATCH_SIZE': 32},
        {'TARGET_UPDATE': 0},
        {'TRAINING_SPEED': 0},
        {'PADDLE_HEIGHT': 400},
    ])
    def test_invalid(self, overrides):
        with pytest.raises(AssertionError):
            Config(**overrides)
