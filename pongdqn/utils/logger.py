"""
Centralized logging infrastructure for the Pong DQN project.

Usage:
    from pongdqn.utils.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Training started")
    logger.debug("Target network synced")
    logger.warning("Optimizer state reset")

Configuration:
    Set LOG_LEVEL in config.py (or pass --log-level) to control verbosity:
    - DEBUG: All messages including per-sync info
    - INFO: Normal operation messages (default)
    - WARNING: Warnings and errors only
    - ERROR: Errors only
"""

import logging
import sys
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence


class LogLevel(Enum):
    """Log levels for configuration."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR

    @classmethod
    def from_name(cls, name: str) -> 'LogLevel':
        """Look up a level by case-insensitive name (e.g. 'debug')."""
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown log level: {name!r}") from None


ROOT_LOGGER_NAME = 'pongdqn'

# Module-level state
_initialized = False
_log_dir: Optional[Path] = None
_file_handler: Optional[logging.FileHandler] = None


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors to console output."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m',
    }

    def __init__(self, fmt: str, use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if self.use_colors:
            # Work on a copy so file handlers never see escape codes
            record = logging.makeLogRecord(record.__dict__)
            color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
            record.levelname = f"{color}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


def setup_logging(
    log_dir: str = 'logs',
    level: LogLevel = LogLevel.INFO,
    console_output: bool = True,
    file_output: bool = True,
    log_filename: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Initialize the logging system.

    Args:
        log_dir: Directory for log files
        level: Minimum log level to capture
        console_output: Whether to output to console
        file_output: Whether to output to file
        log_filename: Custom log filename (default: training_YYYYMMDD_HHMMSS.log)
        force: Re-initialize even if logging was already set up
    """
    global _initialized, _log_dir, _file_handler

    if _initialized and not force:
        return

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level.value)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    _file_handler = None

    # Console handler with colors
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level.value)
        console_fmt = ColoredFormatter(
            '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            use_colors=True
        )
        console_handler.setFormatter(console_fmt)
        root_logger.addHandler(console_handler)

    # File handler without colors
    if file_output:
        _log_dir = Path(log_dir)
        _log_dir.mkdir(parents=True, exist_ok=True)

        if log_filename is None:
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            log_filename = f'training_{timestamp}.log'

        log_path = _log_dir / log_filename
        _file_handler = logging.FileHandler(log_path, mode='a', encoding='utf-8')
        _file_handler.setLevel(logging.DEBUG)  # Capture everything in file
        file_fmt = logging.Formatter(
            '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
        )
        _file_handler.setFormatter(file_fmt)
        root_logger.addHandler(_file_handler)

    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())

    _initialized = True
    root_logger.info(f"Logging initialized (level={level.name}, file={file_output})")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance configured with project settings

    Example:
        logger = get_logger(__name__)
        logger.info("Message")
    """
    # Auto-initialize with console-only defaults if not already done
    if not _initialized:
        setup_logging(file_output=False)

    # Create child logger under the project namespace
    prefix = f'{ROOT_LOGGER_NAME}.'
    if name.startswith(prefix):
        name = name[len(prefix):]

    return logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')


def get_log_path() -> Optional[Path]:
    """Get the current log file path."""
    if _file_handler is not None:
        return Path(_file_handler.baseFilename)
    return None


def log_episode_reward(
    episode: int,
    reward: float,
    history: Sequence[float],
    epsilon: float,
    loss: Optional[float] = None,
    replay_steps: Optional[int] = None,
    window: int = 10,
) -> None:
    """
    Log a finished episode in a consistent format.

    Args:
        episode: 1-based number of the finished episode
        reward: Total reward collected in the episode
        history: All episode rewards so far (used for the running average)
        epsilon: Current exploration rate
        loss: Recent average training loss (if available)
        replay_steps: Replay calls performed so far (if available)
        window: Number of recent episodes in the running average
    """
    logger = get_logger('training')

    recent = list(history)[-window:]
    avg = sum(recent) / len(recent) if recent else 0.0

    metrics = [
        f"ep={episode}",
        f"reward={reward:.1f}",
        f"avg{window}={avg:.2f}",
        f"eps={epsilon:.3f}",
    ]

    if loss is not None:
        metrics.append(f"loss={loss:.5f}")
    if replay_steps is not None:
        metrics.append(f"replays={replay_steps}")

    logger.info(" | ".join(metrics))


def log_hyperparams_change(old, new) -> None:
    """
    Log which hyperparameters changed between two Hyperparams values.

    Args:
        old: Previous hyperparameters
        new: Replacement hyperparameters
    """
    logger = get_logger('hyperparams')

    changes = []
    for name in ('epsilon', 'alpha', 'gamma', 'training_speed'):
        before = getattr(old, name)
        after = getattr(new, name)
        if before != after:
            changes.append(f"{name}: {before:g} -> {after:g}")

    if changes:
        logger.info("UPDATE | " + " | ".join(changes))
    else:
        logger.debug("UPDATE | no changes")
