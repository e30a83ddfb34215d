"""
Experience Replay Buffer
========================

A memory buffer that stores transitions for training the DQN.

Why Experience Replay?
    1. Breaks correlation between consecutive ticks
       (Neural networks learn poorly from correlated data)

    2. Improves sample efficiency
       (Each transition can be used for multiple training steps)

How it works:
    1. Agent plays, stores (state, action, reward, next_state, terminal) records
    2. During training, we sample random batches of distinct records
    3. Old records are discarded when the buffer is full (FIFO)

References:
    Mnih et al., 2015 - "Human-level control through deep reinforcement learning"
"""

from typing import Iterator, List, NamedTuple, Optional, Tuple

import numpy as np

from ..game.pong import Action, GameState


class Transition(NamedTuple):
    """One stored experience. Immutable once created."""
    state: GameState
    action: Action
    reward: float
    next_state: GameState
    terminal: bool


class ReplayBuffer:
    """
    Fixed-size FIFO ring of Transition records.

    Records are kept in a pre-allocated list used as a circular buffer: once
    the buffer is full, each new record overwrites the oldest one.

    Example:
        >>> buffer = ReplayBuffer(capacity=2000)
        >>> buffer.add(Transition(state, Action.STAY, 0.0, next_state, False))
        >>> batch = buffer.sample_batch(32)   # None until 32 records exist
    """

    def __init__(self, capacity: int, rng: Optional[np.random.Generator] = None):
        """
        Initialize the replay buffer.

        Args:
            capacity: Maximum number of transitions to store
            rng: Random generator used for sampling
        """
        if capacity <= 0:
            raise ValueError(f"Capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._storage: List[Optional[Transition]] = [None] * capacity
        self._size = 0  # Current number of transitions stored
        self._position = 0  # Next write slot (also the oldest slot once full)
        self._rng = rng if rng is not None else np.random.default_rng()

    def add(self, transition: Transition) -> None:
        """
        Append a transition, evicting the oldest one when full.

        Args:
            transition: Record to store
        """
        self._storage[self._position] = transition
        self._position = (self._position + 1) % self.capacity
        self._size = min(self._size + 1, self.capacity)

    def push(
        self,
        state: GameState,
        action: Action,
        reward: float,
        next_state: GameState,
        terminal: bool
    ) -> None:
        """Convenience wrapper building the Transition in place."""
        self.add(Transition(state, action, float(reward), next_state, bool(terminal)))

    def sample_batch(self, batch_size: int) -> Optional[List[Transition]]:
        """
        Sample distinct transitions uniformly at random.

        Args:
            batch_size: Number of transitions to sample

        Returns:
            List of `batch_size` transitions at distinct slots, or None when
            fewer than `batch_size` transitions are stored yet.
        """
        if not self.is_ready(batch_size):
            return None

        indices = self._rng.choice(self._size, size=batch_size, replace=False)
        return [self._storage[self._slot(int(i))] for i in indices]  # type: ignore[misc]

    def is_ready(self, batch_size: int) -> bool:
        """Check if buffer has enough transitions for a batch."""
        return self._size >= batch_size

    def clear(self) -> None:
        """Drop every stored transition."""
        self._storage = [None] * self.capacity
        self._size = 0
        self._position = 0

    def _slot(self, age_index: int) -> int:
        """Storage slot of the `age_index`-th oldest transition."""
        if self._size < self.capacity:
            return age_index
        return (self._position + age_index) % self.capacity

    def __getitem__(self, age_index: int) -> Transition:
        """Transition by age, 0 = oldest."""
        if age_index < 0:
            age_index += self._size
        if not 0 <= age_index < self._size:
            raise IndexError("replay buffer index out of range")
        return self._storage[self._slot(age_index)]  # type: ignore[return-value]

    def __iter__(self) -> Iterator[Transition]:
        """Iterate oldest-first."""
        for i in range(self._size):
            yield self._storage[self._slot(i)]  # type: ignore[misc]

    def __len__(self) -> int:
        """Return current buffer size."""
        return self._size


def stack_batch(batch: List[Transition]) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Convert a list of transitions into contiguous numpy arrays.

    Returns:
        (states, action_indices, rewards, next_states, terminals) with
        shapes (B, 6), (B,), (B,), (B, 6), (B,)
    """
    states = np.stack([t.state.to_array() for t in batch])
    actions = np.array([t.action.index for t in batch], dtype=np.int64)
    rewards = np.array([t.reward for t in batch], dtype=np.float32)
    next_states = np.stack([t.next_state.to_array() for t in batch])
    terminals = np.array([t.terminal for t in batch], dtype=np.bool_)
    return states, actions, rewards, next_states, terminals
