"""
Tests for the command line entry point.

These tests verify:
    - Argument parsing and config overrides
    - Rejection of out-of-range hyperparameters
    - A short headless run end to end
"""

import pytest

import main
from pongdqn.utils.logger import setup_logging


@pytest.fixture(autouse=True)
def console_only_logging():
    yield
    setup_logging(file_output=False, force=True)


class TestArgs:
    """Test parsing and overrides."""

    def test_defaults(self):
        args = main.parse_args([])
        assert not args.headless
        assert not args.no_train
        assert args.ticks == 10000
        assert args.seed is None

    def test_overrides(self):
        args = main.parse_args([
            '--epsilon', '0.3', '--lr', '0.002', '--gamma', '0.9',
            '--training-speed', '4', '--seed', '7', '--log-level', 'debug',
        ])
        config = main.build_config(args)
        assert config.EPSILON == 0.3
        assert config.LEARNING_RATE == 0.002
        assert config.GAMMA == 0.9
        assert config.TRAINING_SPEED == 4
        assert config.SEED == 7
        assert config.LOG_LEVEL == 'DEBUG'

    def test_bad_log_level(self):
        with pytest.raises(SystemExit):
            main.parse_args(['--log-level', 'chatty'])


class TestValidation:
    """Test the hyperparameter range check."""

    def test_valid_defaults(self):
        main.validate_hyperparams(main.build_config(main.parse_args([])))

    @pytest.mark.parametrize("argv", [
        ['--epsilon', '1.5'],
        ['--lr', '0'],
        ['--gamma', '-0.1'],
        ['--training-speed', '0'],
    ])
    def test_rejected(self, argv):
        with pytest.raises(ValueError):
            main.validate_hyperparams(main.build_config(main.parse_args(argv)))

    def test_main_returns_error_code(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert main.main(['--headless', '--epsilon', '2']) == 2


class TestHeadless:
    """Test a short headless session."""

    def test_headless_run(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert main.main(['--headless', '--ticks', '60', '--seed', '1', '--cpu']) == 0
        assert list((tmp_path / 'logs').glob('training_*.log'))
