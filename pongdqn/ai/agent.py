"""
DQN Agent
=========

The AI agent that learns to play Pong using Deep Q-Learning, online, while
the match is running.

Key Components:
    1. Live Network    - Used for action selection, trained every replay
    2. Target Network  - Used for stable Q-value estimation
    3. Replay Buffer   - Stores transitions for training
    4. Epsilon-Greedy  - Balances exploration vs exploitation

Training Algorithm (DQN):
    1. Observe state s
    2. Choose action a (epsilon-greedy)
    3. Execute action, observe reward r and next state s'
    4. Store (s, a, r, s', terminal) in replay buffer
    5. Sample mini-batch from replay buffer
    6. Calculate target: y = r + γ * max_a' Q_target(s', a')  (y = r if terminal)
    7. Update live network: minimize (Q(s,a) - y)² for the taken action only
    8. Every TARGET_UPDATE replays, copy live weights into the target network

References:
    Mnih et al., 2015 - "Human-level control through deep reinforcement learning"
"""

import random
from collections import deque
from dataclasses import dataclass, replace
from typing import Deque, List, Optional, Tuple

import numpy as np

from config import Config

from ..game.pong import Action, GameState
from ..utils.logger import get_logger, log_hyperparams_change
from .network import QNetwork
from .replay_buffer import ReplayBuffer, Transition, stack_batch

logger = get_logger(__name__)


@dataclass(frozen=True)
class Hyperparams:
    """
    Live-tunable training knobs.

    Attributes:
        epsilon: Exploration probability in [0, 1]
        alpha: Adam learning rate (> 0)
        gamma: Discount factor in [0, 1]
        training_speed: Replay calls per tick (>= 1)
    """
    epsilon: float
    alpha: float
    gamma: float
    training_speed: int

    @classmethod
    def from_config(cls, config: Config) -> 'Hyperparams':
        """Starting values from the configuration."""
        return cls(
            epsilon=config.EPSILON,
            alpha=config.LEARNING_RATE,
            gamma=config.GAMMA,
            training_speed=config.TRAINING_SPEED,
        )

    def with_changes(self, **changes) -> 'Hyperparams':
        """Copy with some fields replaced."""
        return replace(self, **changes)


class Agent:
    """
    DQN Agent for online reinforcement learning.

    One Agent belongs to exactly one training session. It exclusively owns
    both networks, the replay buffer and the hyperparameters.

    Action Selection:
        - With probability epsilon: random action (exploration)
        - With probability (1-epsilon): best Q-value action (exploitation),
          ties resolved toward the lowest action index

    Attributes:
        live_net: Network used for action selection and trained each replay
        target_net: Periodically synced copy used for bootstrapped targets
        memory: Experience replay buffer
        hyperparams: Current Hyperparams value
        replay_steps: Number of replay() calls that trained

    Example:
        >>> agent = Agent(config)
        >>> action = agent.choose_action(state)
        >>> agent.remember(state, action, reward, next_state, terminal)
        >>> loss = agent.replay()
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        hyperparams: Optional[Hyperparams] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize the DQN agent.

        Args:
            config: Configuration object
            hyperparams: Starting hyperparameters (from config if None)
            rng: Random source for exploration and sampling
        """
        self.config = config or Config()
        self.hyperparams = hyperparams or Hyperparams.from_config(self.config)
        self.batch_size = self.config.BATCH_SIZE
        self.target_update = self.config.TARGET_UPDATE

        self._rng = rng or random.Random(self.config.SEED)
        sample_seed = self._rng.randrange(2 ** 32)

        # Networks: target starts as a verbatim copy of live
        self.live_net = QNetwork(self.config, alpha=self.hyperparams.alpha)
        self.target_net = QNetwork(self.config)
        self.live_net.clone_parameters_into(self.target_net)

        self.memory = ReplayBuffer(
            capacity=self.config.MEMORY_SIZE,
            rng=np.random.default_rng(sample_seed)
        )

        # Replay counter (1-indexed after the first training replay)
        self.replay_steps = 0

        # Episode reward bookkeeping (observability only)
        self.current_episode_reward = 0.0
        self._episode_rewards: List[float] = []

        # Training metrics (bounded to prevent memory growth during long sessions)
        self.losses: Deque[float] = deque(maxlen=self.config.LOSS_HISTORY)

        # Track whether last action was exploration
        self.last_action_explored = False

        logger.info(
            f"Agent ready: {self.live_net.count_parameters():,} parameters on "
            f"{self.live_net.device}, memory={self.memory.capacity}, "
            f"batch={self.batch_size}, target sync every {self.target_update} replays"
        )

    @property
    def epsilon(self) -> float:
        """Current exploration rate."""
        return self.hyperparams.epsilon

    @property
    def gamma(self) -> float:
        """Current discount factor."""
        return self.hyperparams.gamma

    def choose_action(self, state: GameState) -> Action:
        """
        Select an action using the epsilon-greedy policy.

        Args:
            state: Current table state

        Returns:
            Selected Action
        """
        if self._rng.random() < self.hyperparams.epsilon:
            self.last_action_explored = True
            return Action.from_index(self._rng.randrange(self.config.ACTION_SIZE))

        self.last_action_explored = False
        return self.best_action(state)

    def best_action(self, state: GameState) -> Action:
        """Greedy action; np.argmax returns the first maximum on ties."""
        q_values = self.get_q_values(state)
        return Action.from_index(int(np.argmax(q_values)))

    def get_q_values(self, state: GameState) -> np.ndarray:
        """
        Get Q-values for all actions (useful for visualization).

        Args:
            state: Current table state

        Returns:
            Array of Q-values indexed by Action.index
        """
        return self.live_net.predict(state.to_array())[0]

    def remember(
        self,
        state: GameState,
        action: Action,
        reward: float,
        next_state: GameState,
        terminal: bool
    ) -> None:
        """
        Store a transition and update the episode reward tally.

        Args:
            state: State the action was chosen in
            action: Action taken
            reward: Reward received
            next_state: Resulting state
            terminal: Whether a point was scored (episode ended)
        """
        self.memory.add(Transition(state, action, float(reward), next_state, bool(terminal)))

        self.current_episode_reward += reward
        if terminal:
            self._episode_rewards.append(self.current_episode_reward)
            self.current_episode_reward = 0.0

    def compute_targets(self, batch: List[Transition]) -> Tuple[np.ndarray, np.ndarray]:
        """
        Build the training batch for one replay.

        The target triple for each transition is the live network's own
        prediction with only the taken action's slot replaced by the
        Bellman target, so the loss only moves that output.

        Args:
            batch: Sampled transitions

        Returns:
            (states, targets) arrays of shapes (B, 6) and (B, 3)
        """
        states, actions, rewards, next_states, terminals = stack_batch(batch)

        targets = self.live_net.predict(states)
        next_q = self.target_net.predict(next_states)

        bootstrapped = rewards + self.hyperparams.gamma * next_q.max(axis=1)
        action_targets = np.where(terminals, rewards, bootstrapped)

        targets[np.arange(len(batch)), actions] = action_targets
        return states, targets

    def replay(self) -> Optional[float]:
        """
        Perform one training step on a sampled minibatch.

        Returns:
            Loss value if training occurred, None while the buffer holds
            fewer than one batch
        """
        if not self.memory.is_ready(self.batch_size):
            return None

        self.replay_steps += 1

        batch = self.memory.sample_batch(self.batch_size)
        assert batch is not None
        states, targets = self.compute_targets(batch)

        loss = self.live_net.train_step(states, targets)
        self.losses.append(loss)

        # Sync after this replay's gradient update
        if self.replay_steps % self.target_update == 0:
            self.update_target_network()

        return loss

    def update_target_network(self) -> None:
        """Hard update: Copy live network weights to target network."""
        self.live_net.clone_parameters_into(self.target_net)
        logger.debug(f"Target network synced at replay {self.replay_steps}")

    def update_hyperparams(self, hyperparams: Hyperparams) -> None:
        """
        Swap in new hyperparameters.

        The replay buffer, replay counter, episode history and target network
        are kept. The optimizer is rebuilt at the new learning rate, which
        also resets Adam's moment estimates.

        Args:
            hyperparams: Replacement hyperparameters
        """
        previous = self.hyperparams
        self.hyperparams = hyperparams
        self.live_net.rebuild_optimizer(hyperparams.alpha)
        log_hyperparams_change(previous, hyperparams)

    def get_episode_reward_history(self) -> List[float]:
        """Copy of the per-episode reward totals."""
        return list(self._episode_rewards)

    @property
    def episodes(self) -> int:
        """Number of finished episodes."""
        return len(self._episode_rewards)

    def get_average_loss(self, n: int = 100) -> float:
        """Get average of last n losses."""
        if not self.losses:
            return 0.0
        count = min(n, len(self.losses))
        total = 0.0
        it = iter(reversed(self.losses))
        for _ in range(count):
            total += next(it)
        return total / count


# Testing
if __name__ == "__main__":
    from ..game.pong import PongEnvironment

    print("Testing DQN Agent...")

    config = Config()
    env = PongEnvironment(config)
    agent = Agent(config)

    state = env.initial_state()
    for _ in range(200):
        action = agent.choose_action(state)
        next_state, reward, terminal, _ = env.step(state, 0.0, action)
        agent.remember(state, action, reward, next_state, terminal)
        agent.replay()
        state = next_state

    print(f"   Memory buffer size: {len(agent.memory)}")
    print(f"   Replay steps: {agent.replay_steps}")
    print(f"   Average loss: {agent.get_average_loss():.4f}")
    print(f"   Episode rewards: {agent.get_episode_reward_history()}")
