"""
Training Session
================

Orchestrates one live match:
    1. Step the Pong table once per tick
    2. Let the agent act (training) or the ball tracker (demo)
    3. Store transitions and run `training_speed` replays per tick
    4. Keep the match score until someone reaches WIN_SCORE
    5. Track metrics for the HUD and the log

The session is a pure simulation/training step. Rendering lives in
pongdqn.visualizer and is composed with the session by the driver (main.py).
"""

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from config import Config

from ..game.pong import Action, GameState, PongEnvironment, StepEvent
from ..utils.logger import get_logger, log_episode_reward
from .agent import Agent, Hyperparams

logger = get_logger(__name__)

PLAYER = 'player'
AI = 'ai'


@dataclass
class MatchScore:
    """Points scored by each side in the current match."""
    player: int = 0
    ai: int = 0

    def record(self, event: StepEvent) -> None:
        """Count a point if the tick ended one."""
        if event is StepEvent.HUMAN_SCORED:
            self.player += 1
        elif event is StepEvent.AGENT_SCORED:
            self.ai += 1

    def winner(self, win_score: int) -> Optional[str]:
        """'player', 'ai' or None while the match is running."""
        if self.player >= win_score:
            return PLAYER
        if self.ai >= win_score:
            return AI
        return None


@dataclass(frozen=True)
class TickResult:
    """Everything that happened during one simulated tick."""
    state: GameState
    action: Optional[Action]
    reward: float
    terminal: bool
    event: StepEvent
    loss: Optional[float] = None
    replays: int = 0


class FrameGate:
    """
    Fixed-rate tick limiter.

    A tick requested sooner than one interval after the last accepted tick
    is dropped, never queued, so a slow frame can't build a backlog.
    """

    def __init__(self, fps: int):
        self.interval = 1.0 / fps
        self._last: Optional[float] = None
        self.dropped = 0

    def ready(self, now: float) -> bool:
        """Accept a tick at time `now` (seconds) if the interval elapsed."""
        if self._last is not None and now - self._last < self.interval:
            self.dropped += 1
            return False
        self._last = now
        return True

    def reset(self) -> None:
        """Forget the last accepted tick."""
        self._last = None
        self.dropped = 0


class TrainingMetrics:
    """
    Tracks per-session statistics for display.

    Metrics tracked:
        - Ticks simulated and replays run
        - Rally length (paddle returns) of each finished point
        - Who won each point
    """

    def __init__(self, history_length: int = 1000):
        """
        Initialize metrics tracker.

        Args:
            history_length: Maximum number of points to remember
        """
        self.history_length = history_length

        self.ticks = 0
        self.replays = 0
        self.current_rally = 0
        self.rallies: List[int] = []
        self.agent_points: List[bool] = []

    def record(self, result: TickResult) -> None:
        """Fold one tick into the running totals."""
        self.ticks += 1
        self.replays += result.replays

        if result.event in (StepEvent.HUMAN_RETURN, StepEvent.AGENT_RETURN):
            self.current_rally += 1
        elif result.terminal:
            self.rallies.append(self.current_rally)
            self.agent_points.append(result.event is StepEvent.AGENT_SCORED)
            self.current_rally = 0

            if len(self.rallies) > self.history_length:
                self.rallies = self.rallies[-self.history_length:]
                self.agent_points = self.agent_points[-self.history_length:]

    def get_average_rally(self, n: int = 100) -> float:
        """Average rally length over the last n points."""
        if not self.rallies:
            return 0.0
        return float(np.mean(self.rallies[-n:]))

    def get_point_rate(self, n: int = 100) -> float:
        """Fraction of the last n points won by the agent."""
        if not self.agent_points:
            return 0.0
        recent = self.agent_points[-n:]
        return sum(recent) / len(recent)


class TrainingSession:
    """
    Explicit context object for one live training session.

    Owns the environment, the agent, the current table state and the
    match score. The driver calls `tick()` once per accepted frame.

    Example:
        >>> session = TrainingSession(Config())
        >>> result = session.tick(human_delta=-6.0)
        >>> session.agent.get_episode_reward_history()
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        agent: Optional[Agent] = None,
        env: Optional[PongEnvironment] = None,
        training: bool = True
    ):
        """
        Initialize the session.

        Args:
            config: Configuration object
            agent: Agent to train (a new one is built if None)
            env: Environment (a new one is built if None)
            training: Start with the learning agent in control
        """
        self.config = config or Config()
        self.env = env or PongEnvironment(self.config)
        self.agent = agent or Agent(self.config)
        self.training = training

        self.state: GameState = self.env.initial_state()
        self.score = MatchScore()
        self.metrics = TrainingMetrics(self.config.PLOT_HISTORY_LENGTH * 10)
        self.paused = False
        self.winner: Optional[str] = None

    @property
    def game_over(self) -> bool:
        """True once either side reached WIN_SCORE."""
        return self.winner is not None

    @property
    def hyperparams(self) -> Hyperparams:
        """Hyperparameters currently used by the agent."""
        return self.agent.hyperparams

    def tick(self, human_delta: float = 0.0) -> Optional[TickResult]:
        """
        Simulate one frame.

        Args:
            human_delta: Human paddle movement requested this frame

        Returns:
            TickResult, or None when paused or the match is over
        """
        if self.paused or self.game_over:
            return None

        action: Optional[Action] = None
        loss: Optional[float] = None
        replays = 0

        if self.training:
            action = self.agent.choose_action(self.state)
            step = self.env.step(self.state, human_delta, action)
            self.agent.remember(self.state, action, step.reward, step.next_state, step.terminal)

            # Replays run one after another; each reads the weights the previous one wrote
            for _ in range(self.agent.hyperparams.training_speed):
                replay_loss = self.agent.replay()
                if replay_loss is not None:
                    loss = replay_loss
                    replays += 1
        else:
            step = self.env.step_tracking(self.state, human_delta)

        self.state = step.next_state
        result = TickResult(
            state=step.next_state,
            action=action,
            reward=step.reward,
            terminal=step.terminal,
            event=step.event,
            loss=loss,
            replays=replays,
        )
        self.metrics.record(result)

        if step.terminal:
            self._finish_point(step.event)

        return result

    def _finish_point(self, event: StepEvent) -> None:
        """Update the score and log the finished episode."""

        self.score.record(event)
        self.winner = self.score.winner(self.config.WIN_SCORE)

        if self.training and self.agent.episodes % self.config.LOG_EVERY == 0:
            history = self.agent.get_episode_reward_history()
            log_episode_reward(
                episode=len(history),
                reward=history[-1],
                history=history,
                epsilon=self.agent.epsilon,
                loss=self.agent.get_average_loss(100) if self.agent.losses else None,
                replay_steps=self.agent.replay_steps,
            )

        if self.winner is not None:
            logger.info(
                f"Match over: {self.winner} wins "
                f"({self.score.player} - {self.score.ai})"
            )

    def reset_match(self) -> None:
        """Start a new match. The agent and its memory are kept."""
        self.state = self.env.initial_state()
        self.score = MatchScore()
        self.winner = None
        self.metrics.current_rally = 0
        logger.info("Match reset")

    def set_training(self, training: bool) -> None:
        """Switch between the learning agent and the ball tracker."""
        if training != self.training:
            self.training = training
            logger.info(f"Training {'enabled' if training else 'disabled'}")

    def toggle_pause(self) -> None:
        """Pause or resume the simulation."""
        self.paused = not self.paused
        logger.info("Paused" if self.paused else "Resumed")

    def apply_hyperparams(self, hyperparams: Hyperparams) -> None:
        """Forward a hyperparameter change to the agent."""
        self.agent.update_hyperparams(hyperparams)

    def scripted_human_delta(self) -> float:
        """Human paddle movement for headless runs: a slow ball follower."""
        speed = self.env.paddle_speed * self.config.HEADLESS_HUMAN_SPEED_FACTOR
        return self.env.follow_ball(self.state.paddle_y, self.state.ball_y, speed)

    def run(self, num_ticks: int) -> TrainingMetrics:
        """
        Run headless for a fixed number of ticks.

        Args:
            num_ticks: Ticks to simulate (a finished match is restarted)

        Returns:
            Session metrics
        """

        logger.info(f"Headless session: {num_ticks:,} ticks, training={self.training}")

        for _ in range(num_ticks):
            if self.game_over:
                self.reset_match()
            self.tick(self.scripted_human_delta())

        history = self.agent.get_episode_reward_history()
        logger.info(
            f"Session complete: ticks={self.metrics.ticks:,} | "
            f"replays={self.agent.replay_steps:,} | episodes={len(history)} | "
            f"avg_rally={self.metrics.get_average_rally():.2f} | "
            f"agent_point_rate={self.metrics.get_point_rate() * 100:.1f}%"
        )
        return self.metrics
