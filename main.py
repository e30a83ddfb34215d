#!/usr/bin/env python3
"""
Live Pong DQN - Main Entry Point
================================

Play Pong against an agent that learns while you play.

Usage:
    # Play against the learning agent (default)
    python main.py

    # Start with the ball tracker, switch to learning later with T
    python main.py --no-train

    # Train without visualization against a scripted opponent
    python main.py --headless --ticks 20000

    # Custom starting hyperparameters
    python main.py --epsilon 0.2 --lr 0.0005 --gamma 0.9 --training-speed 3

Press:
    - UP/DOWN: Move your paddle (left)
    - T: Toggle training (learning agent vs ball tracker)
    - P: Pause/Resume
    - R: Reset the match
    - 1/2, 3/4, 5/6, 7/8: Epsilon, learning rate, gamma, training speed -/+
    - ESC or Q: Quit
"""

# Suppress pygame's pkg_resources deprecation warning (pygame issue #4557)
import warnings
warnings.filterwarnings("ignore", category=UserWarning, module="pygame.pkgdata")

import argparse
import random
import sys
import time
from typing import List, Optional

import numpy as np
import pygame
import torch

from config import Config
from pongdqn.ai.agent import Hyperparams
from pongdqn.ai.trainer import FrameGate, TrainingSession
from pongdqn.utils.logger import LogLevel, get_log_path, get_logger, setup_logging
from pongdqn.visualizer.hud import HyperparamControls, TrainingHUD
from pongdqn.visualizer.renderer import PongRenderer

logger = get_logger(__name__)


class GameApp:
    """
    Main application: the live match with the training panel beside it.

    This class manages:
        - Pygame window and rendering
        - Keyboard input (human paddle, toggles, hyperparameter sliders)
        - The fixed-rate tick loop driving the TrainingSession
    """

    def __init__(self, config: Config, session: TrainingSession):
        """
        Initialize the application.

        Args:
            config: Configuration object
            session: Session to drive
        """
        self.config = config
        self.session = session

        pygame.init()
        pygame.display.set_caption("Live Pong DQN")

        self.window_width = config.SCREEN_WIDTH + config.HUD_WIDTH
        self.window_height = config.SCREEN_HEIGHT
        self.screen = pygame.display.set_mode((self.window_width, self.window_height))
        self.clock = pygame.time.Clock()

        self.renderer = PongRenderer(config)
        self.hud = TrainingHUD(config, x=config.SCREEN_WIDTH, width=config.HUD_WIDTH, height=config.SCREEN_HEIGHT)
        self.controls = HyperparamControls(config)
        self.gate = FrameGate(config.FPS)

        self.running = True

    def run(self) -> None:
        """Run the interactive loop until the window is closed."""
        logger.info(
            f"Live session started: {self.config.SCREEN_WIDTH}x{self.config.SCREEN_HEIGHT} "
            f"@ {self.config.FPS} ticks/s, training={self.session.training}"
        )

        while self.running:
            self._handle_events()

            if self.gate.ready(time.perf_counter()):
                self.session.tick(self._human_delta())

            self._render()
            self.clock.tick(self.config.FPS)

        if self.gate.dropped:
            logger.debug(f"Dropped {self.gate.dropped} early ticks")

    def _human_delta(self) -> float:
        """Paddle movement from the held arrow keys."""
        keys = pygame.key.get_pressed()
        delta = 0.0
        if keys[pygame.K_UP]:
            delta -= self.config.PADDLE_SPEED
        if keys[pygame.K_DOWN]:
            delta += self.config.PADDLE_SPEED
        return delta

    def _handle_events(self) -> None:
        """Handle pygame events and keyboard input."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_ESCAPE, pygame.K_q):
                    self.running = False

                elif event.key == pygame.K_p:
                    self.session.toggle_pause()

                elif event.key == pygame.K_t:
                    self.session.set_training(not self.session.training)

                elif event.key == pygame.K_r:
                    self.session.reset_match()
                    self.gate.reset()

                else:
                    updated = self.controls.handle_key(event.key, self.session.hyperparams)
                    if updated is not None:
                        self.session.apply_hyperparams(updated)

    def _render(self) -> None:
        """Draw the table and the training panel."""
        session = self.session
        agent = session.agent

        self.renderer.render(
            self.screen,
            session.state,
            session.score,
            training=session.training,
            winner=session.winner,
            paused=session.paused,
        )
        self.hud.render(
            self.screen,
            hyperparams=session.hyperparams,
            replay_steps=agent.replay_steps,
            reward_history=agent.get_episode_reward_history(),
            training=session.training,
            layer_info=agent.live_net.model.get_layer_info(),
            average_loss=agent.get_average_loss() if agent.losses else None,
        )
        pygame.display.flip()


def build_config(args: argparse.Namespace) -> Config:
    """Config with command line overrides applied."""
    config = Config()

    if args.epsilon is not None:
        config.EPSILON = args.epsilon
    if args.lr is not None:
        config.LEARNING_RATE = args.lr
    if args.gamma is not None:
        config.GAMMA = args.gamma
    if args.training_speed is not None:
        config.TRAINING_SPEED = args.training_speed
    if args.cpu:
        config.FORCE_CPU = True
    if args.seed is not None:
        config.SEED = args.seed
    if args.log_level is not None:
        config.LOG_LEVEL = args.log_level

    return config


def validate_hyperparams(config: Config) -> None:
    """Reject starting hyperparameters outside their legal ranges."""
    hp = Hyperparams.from_config(config)
    errors: List[str] = []
    if not 0.0 <= hp.epsilon <= 1.0:
        errors.append(f"epsilon must be in [0, 1], got {hp.epsilon}")
    if hp.alpha <= 0:
        errors.append(f"learning rate must be positive, got {hp.alpha}")
    if not 0.0 <= hp.gamma <= 1.0:
        errors.append(f"gamma must be in [0, 1], got {hp.gamma}")
    if hp.training_speed < 1:
        errors.append(f"training speed must be at least 1, got {hp.training_speed}")
    if errors:
        raise ValueError("; ".join(errors))


def seed_everything(seed: int) -> None:
    """Seed Python, numpy and torch."""
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Live Pong DQN - play Pong against an agent that learns while you play",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
EXAMPLES
========
    python main.py                              Play against the learning agent
    python main.py --no-train                   Start against the ball tracker
    python main.py --headless --ticks 20000     Train against a scripted opponent
    python main.py --seed 42 --cpu             Reproducible run on CPU
        """
    )

    # Mode selection
    parser.add_argument(
        '--headless', action='store_true',
        help='No window: a scripted opponent plays for --ticks ticks'
    )
    parser.add_argument(
        '--ticks', type=int, default=10000,
        help='Ticks to simulate in headless mode (default: 10000)'
    )
    parser.add_argument(
        '--no-train', action='store_true',
        help='Start with the ball tracker driving the AI paddle'
    )

    # Hyperparameters
    parser.add_argument(
        '--epsilon', type=float, default=None,
        help='Exploration rate'
    )
    parser.add_argument(
        '--lr', type=float, default=None,
        help='Learning rate'
    )
    parser.add_argument(
        '--gamma', type=float, default=None,
        help='Discount factor'
    )
    parser.add_argument(
        '--training-speed', type=int, default=None,
        help='Replay calls per tick'
    )

    # Other options
    parser.add_argument(
        '--cpu', action='store_true',
        help='Force CPU'
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed for reproducibility'
    )
    parser.add_argument(
        '--log-level', type=str.upper, default=None,
        choices=[level.name for level in LogLevel],
        help='Logging verbosity (default: from config)'
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    config = build_config(args)

    setup_logging(
        log_dir=config.LOG_DIR,
        level=LogLevel.from_name(config.LOG_LEVEL),
        file_output=config.LOG_TO_FILE,
        force=True,
    )

    try:
        validate_hyperparams(config)
    except ValueError as e:
        logger.error(f"Invalid hyperparameters: {e}")
        return 2

    if config.SEED is not None:
        seed_everything(config.SEED)

    log_path = get_log_path()
    if log_path:
        logger.info(f"Logging to {log_path}")

    session = TrainingSession(config, training=not args.no_train)

    if args.headless:
        try:
            session.run(args.ticks)
        except KeyboardInterrupt:
            logger.warning("Headless session interrupted by user")
        return 0

    app = GameApp(config, session)
    try:
        app.run()
    except KeyboardInterrupt:
        logger.warning("Session interrupted by user")
    finally:
        pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
