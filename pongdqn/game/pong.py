"""
Pong Environment
================

Physics and reward model for the live-training Pong table.

The environment is a pure transition function: it never stores the game
state itself. The caller passes the previous GameState, the human paddle
movement and the agent's Action, and receives a brand-new GameState
together with the agent's reward and a terminal flag.

Table layout:
    - Human paddle on the left edge  (x in [0, PADDLE_WIDTH])
    - Agent paddle on the right edge (x in [WIDTH - PADDLE_WIDTH, WIDTH])
    - Ball is a BALL_SIZE square, its position is the top-left corner

Rewards (for the agent, one tick only):
    - Human paddle returns the ball   -> -1
    - Agent paddle returns the ball   -> +10
    - Ball exits past the human side  -> +20, terminal (agent scores)
    - Ball exits past the agent side  -> -20, terminal (human scores)
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import NamedTuple, Optional, Tuple

import numpy as np

from config import Config


class Action(Enum):
    """
    Agent paddle command.

    The enum values are labels only. The Q-network output index is given by
    the explicit `index` projection and must stay 0/1/2 for UP/STAY/DOWN.
    """
    MOVE_UP = 'up'
    STAY = 'stay'
    MOVE_DOWN = 'down'

    @property
    def index(self) -> int:
        """Q-network output slot for this action."""
        return _ACTION_TO_INDEX[self]

    @property
    def direction(self) -> int:
        """Vertical direction: -1 up, 0 stay, +1 down (screen coordinates)."""
        return _ACTION_TO_DIRECTION[self]

    @classmethod
    def from_index(cls, index: int) -> 'Action':
        """Inverse of `index`."""
        if not 0 <= index < len(_INDEX_TO_ACTION):
            raise ValueError(f"Action index out of range: {index}")
        return _INDEX_TO_ACTION[index]


_INDEX_TO_ACTION: Tuple[Action, ...] = (Action.MOVE_UP, Action.STAY, Action.MOVE_DOWN)
_ACTION_TO_INDEX = {Action.MOVE_UP: 0, Action.STAY: 1, Action.MOVE_DOWN: 2}
_ACTION_TO_DIRECTION = {Action.MOVE_UP: -1, Action.STAY: 0, Action.MOVE_DOWN: 1}

ACTION_LABELS = ['UP', 'STAY', 'DOWN']


@dataclass(frozen=True)
class GameState:
    """
    Immutable snapshot of the table.

    Attributes:
        ball_x: Ball x (left edge)
        ball_y: Ball y (top edge)
        ball_vel_x: Horizontal velocity (negative = toward the human)
        ball_vel_y: Vertical velocity (negative = upward)
        paddle_y: Human paddle top edge
        agent_paddle_y: Agent paddle top edge
    """
    ball_x: float
    ball_y: float
    ball_vel_x: float
    ball_vel_y: float
    paddle_y: float
    agent_paddle_y: float

    SIZE = 6

    def to_array(self) -> np.ndarray:
        """Network input vector, fields in declaration order."""
        return np.array(
            [
                self.ball_x,
                self.ball_y,
                self.ball_vel_x,
                self.ball_vel_y,
                self.paddle_y,
                self.agent_paddle_y,
            ],
            dtype=np.float32,
        )

    @classmethod
    def from_array(cls, values) -> 'GameState':
        """Build a state from a 6-element sequence (inverse of to_array)."""
        if len(values) != cls.SIZE:
            raise ValueError(f"Expected {cls.SIZE} values, got {len(values)}")
        return cls(*(float(v) for v in values))


class StepEvent(Enum):
    """What happened to the ball during one tick."""
    NONE = 'none'
    HUMAN_RETURN = 'human_return'
    AGENT_RETURN = 'agent_return'
    AGENT_SCORED = 'agent_scored'
    HUMAN_SCORED = 'human_scored'


class StepResult(NamedTuple):
    """Output of PongEnvironment.step."""
    next_state: GameState
    reward: float
    terminal: bool
    event: StepEvent = StepEvent.NONE


class PongEnvironment:
    """
    Deterministic Pong transition and reward function.

    The only randomness is the vertical component of the serve after a
    point, drawn from the environment's own numpy Generator so runs can be
    seeded.

    Example:
        >>> env = PongEnvironment(Config())
        >>> state = env.initial_state()
        >>> state, reward, terminal, event = env.step(state, 0.0, Action.STAY)
    """

    def __init__(self, config: Optional[Config] = None, rng: Optional[np.random.Generator] = None):
        """
        Initialize the environment.

        Args:
            config: Configuration object (uses default if None)
            rng: Random generator for serves (seeded from config.SEED if None)
        """
        self.config = config or Config()

        self.width = self.config.SCREEN_WIDTH
        self.height = self.config.SCREEN_HEIGHT
        self.paddle_width = self.config.PADDLE_WIDTH
        self.paddle_height = self.config.PADDLE_HEIGHT
        self.paddle_speed = self.config.PADDLE_SPEED
        self.ball_size = self.config.BALL_SIZE
        self.ball_speed = self.config.BALL_SPEED

        # Pre-computed limits
        self._paddle_max_y = float(self.height - self.paddle_height)
        self._ball_max_y = float(self.height - self.ball_size)
        self._agent_plane_x = float(self.width - self.paddle_width - self.ball_size)

        self._rng = rng if rng is not None else np.random.default_rng(self.config.SEED)

    @property
    def state_size(self) -> int:
        """State vector dimension."""
        return GameState.SIZE

    @property
    def action_size(self) -> int:
        """Number of possible actions."""
        return len(_INDEX_TO_ACTION)

    def seed(self, seed: int) -> None:
        """Reseed the serve generator."""
        self._rng = np.random.default_rng(seed)

    def initial_state(self) -> GameState:
        """Ball in the centre heading down-right, both paddles centred."""
        paddle_y = self.height / 2 - self.paddle_height / 2
        return GameState(
            ball_x=self.width / 2,
            ball_y=self.height / 2,
            ball_vel_x=float(self.ball_speed),
            ball_vel_y=float(self.ball_speed),
            paddle_y=paddle_y,
            agent_paddle_y=paddle_y,
        )

    def move_paddle(self, paddle_y: float, delta: float) -> float:
        """Apply a vertical delta to a paddle, clamped to the table."""
        return max(0.0, min(self._paddle_max_y, paddle_y + delta))

    def step(self, prev_state: GameState, human_delta: float, action: Action) -> StepResult:
        """
        Advance the table by one tick with the agent controlling its paddle.

        Args:
            prev_state: State at the start of the tick
            human_delta: Requested human paddle movement in pixels
            action: Agent paddle command

        Returns:
            StepResult(next_state, reward, terminal, event)
        """
        human_y = self.move_paddle(prev_state.paddle_y, human_delta)
        agent_y = self.move_paddle(prev_state.agent_paddle_y, action.direction * self.paddle_speed)
        return self._advance_ball(prev_state, human_y, agent_y)

    def tracking_delta(self, state: GameState) -> float:
        """
        Paddle delta of the simple ball-tracking opponent.

        Moves at a fraction of the normal paddle speed toward the ball
        whenever the ball leaves a small dead zone around the paddle centre.
        """
        speed = self.paddle_speed * self.config.TRACKER_SPEED_FACTOR
        return self.follow_ball(state.agent_paddle_y, state.ball_y, speed)

    def follow_ball(self, paddle_y: float, ball_y: float, speed: float) -> float:
        """Delta moving a paddle toward ball_y, zero inside the dead zone."""
        paddle_center = paddle_y + self.paddle_height / 2
        if ball_y < paddle_center - self.config.TRACKER_DEADZONE:
            return -speed
        if ball_y > paddle_center + self.config.TRACKER_DEADZONE:
            return speed
        return 0.0

    def step_tracking(self, prev_state: GameState, human_delta: float) -> StepResult:
        """Advance one tick with the ball tracker driving the agent paddle."""
        human_y = self.move_paddle(prev_state.paddle_y, human_delta)
        agent_y = self.move_paddle(prev_state.agent_paddle_y, self.tracking_delta(prev_state))
        return self._advance_ball(prev_state, human_y, agent_y)

    def _advance_ball(self, prev_state: GameState, human_y: float, agent_y: float) -> StepResult:
        """Move the ball, resolve collisions and scoring."""
        ball_x = prev_state.ball_x + prev_state.ball_vel_x
        ball_y = prev_state.ball_y + prev_state.ball_vel_y
        vel_x = prev_state.ball_vel_x
        vel_y = prev_state.ball_vel_y

        reward = 0.0
        terminal = False
        event = StepEvent.NONE

        # Top/bottom walls
        if ball_y <= 0 or ball_y >= self._ball_max_y:
            vel_y = -vel_y
            ball_y = max(0.0, min(self._ball_max_y, ball_y))

        # Human paddle (left); only while the ball travels toward it
        if ball_x <= self.paddle_width and self._overlaps(ball_y, human_y) and vel_x < 0:
            vel_x = -vel_x
            vel_y = self._deflect(ball_y, human_y)
            reward = self.config.REWARD_HUMAN_RETURN
            event = StepEvent.HUMAN_RETURN

        # Agent paddle (right)
        if ball_x >= self._agent_plane_x and self._overlaps(ball_y, agent_y) and vel_x > 0:
            vel_x = -vel_x
            vel_y = self._deflect(ball_y, agent_y)
            reward = self.config.REWARD_AGENT_RETURN
            event = StepEvent.AGENT_RETURN

        # Scoring overrides any paddle reward from this tick
        if ball_x <= 0:
            reward = self.config.REWARD_AGENT_SCORES
            terminal = True
            event = StepEvent.AGENT_SCORED
            ball_x, ball_y, vel_x, vel_y = self._serve(direction=1)
        elif ball_x >= self.width:
            reward = self.config.REWARD_HUMAN_SCORES
            terminal = True
            event = StepEvent.HUMAN_SCORED
            ball_x, ball_y, vel_x, vel_y = self._serve(direction=-1)

        next_state = replace(
            prev_state,
            ball_x=float(ball_x),
            ball_y=float(ball_y),
            ball_vel_x=float(vel_x),
            ball_vel_y=float(vel_y),
            paddle_y=float(human_y),
            agent_paddle_y=float(agent_y),
        )
        return StepResult(next_state, float(reward), terminal, event)

    def _overlaps(self, ball_y: float, paddle_y: float) -> bool:
        """True if the ball's vertical extent touches the paddle's."""
        return ball_y + self.ball_size >= paddle_y and ball_y <= paddle_y + self.paddle_height

    def _deflect(self, ball_y: float, paddle_y: float) -> float:
        """Vertical velocity after a paddle hit, linear in the hit offset."""
        offset = (ball_y - paddle_y) / self.paddle_height
        offset = max(0.0, min(1.0, offset))
        return self.ball_speed * (2 * offset - 1)

    def _serve(self, direction: int) -> Tuple[float, float, float, float]:
        """Centre the ball with a random vertical component."""
        vel_y = (self._rng.random() * 2 - 1) * self.ball_speed
        return (
            self.width / 2,
            self.height / 2,
            float(direction * self.ball_speed),
            float(vel_y),
        )
