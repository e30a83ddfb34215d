"""
Tests for the DQN Agent.

These tests verify:
    - Epsilon-greedy action selection and the tie-break rule
    - Episode reward bookkeeping
    - Bellman targets (terminal and bootstrapped)
    - Replay gating and target-network sync cadence
    - Live hyperparameter changes
"""

import random

import numpy as np
import pytest

from pongdqn.ai.agent import Agent, Hyperparams
from pongdqn.ai.replay_buffer import Transition
from pongdqn.game.pong import Action, GameState


def random_state(rng: np.random.Generator) -> GameState:
    return GameState.from_array(rng.uniform(0, 400, size=6))


def fill_memory(agent: Agent, count: int, seed: int = 0, terminal: bool = False) -> None:
    """Store `count` random non-zero-reward transitions."""
    rng = np.random.default_rng(seed)
    for i in range(count):
        agent.remember(
            random_state(rng),
            Action.from_index(i % 3),
            float(rng.choice([-1.0, 10.0, 20.0, -20.0])),
            random_state(rng),
            terminal,
        )


class TestHyperparams:
    """Test the hyperparameter value object."""

    def test_from_config(self, config):
        hp = Hyperparams.from_config(config)
        assert hp == Hyperparams(epsilon=0.1, alpha=0.001, gamma=0.95, training_speed=1)

    def test_with_changes_returns_copy(self, config):
        hp = Hyperparams.from_config(config)
        changed = hp.with_changes(gamma=0.5)
        assert changed.gamma == 0.5
        assert hp.gamma == 0.95


class TestAgentInitialization:
    """Test agent construction."""

    def test_target_starts_as_copy_of_live(self, agent):
        assert agent.live_net.parameters_equal(agent.target_net)

    def test_starts_empty(self, agent, config):
        assert len(agent.memory) == 0
        assert agent.memory.capacity == config.MEMORY_SIZE
        assert agent.replay_steps == 0
        assert agent.get_episode_reward_history() == []

    def test_target_has_no_optimizer(self, agent):
        assert agent.target_net.optimizer is None
        assert agent.live_net.optimizer is not None


class TestActionSelection:
    """Test epsilon-greedy action selection."""

    def test_greedy_when_epsilon_zero(self, agent, env):
        agent.hyperparams = agent.hyperparams.with_changes(epsilon=0.0)
        state = env.initial_state()
        for _ in range(20):
            assert agent.choose_action(state) is agent.best_action(state)
            assert not agent.last_action_explored

    def test_explores_when_epsilon_one(self, agent, env):
        agent.hyperparams = agent.hyperparams.with_changes(epsilon=1.0)
        state = env.initial_state()
        seen = set()
        for _ in range(100):
            seen.add(agent.choose_action(state))
            assert agent.last_action_explored
        assert seen == set(Action)

    @pytest.mark.parametrize("q_values,expected", [
        ([1.0, 1.0, 0.0], Action.MOVE_UP),
        ([0.0, 2.0, 2.0], Action.STAY),
        ([3.0, 3.0, 3.0], Action.MOVE_UP),
        ([0.0, 0.0, 1.0], Action.MOVE_DOWN),
    ])
    def test_ties_break_toward_lowest_index(self, agent, env, monkeypatch, q_values, expected):
        monkeypatch.setattr(agent, 'get_q_values', lambda state: np.array(q_values))
        assert agent.best_action(env.initial_state()) is expected

    def test_q_values_shape(self, agent, env):
        assert agent.get_q_values(env.initial_state()).shape == (3,)


class TestRemember:
    """Test transition storage and episode bookkeeping."""

    def test_stores_transition(self, agent, env):
        state = env.initial_state()
        agent.remember(state, Action.STAY, -1.0, state, False)
        assert len(agent.memory) == 1
        assert agent.memory[0] == Transition(state, Action.STAY, -1.0, state, False)

    def test_episode_reward_accumulates_until_terminal(self, agent, env):
        state = env.initial_state()
        agent.remember(state, Action.STAY, -1.0, state, False)
        agent.remember(state, Action.STAY, 10.0, state, False)
        assert agent.current_episode_reward == 9.0
        assert agent.episodes == 0

        agent.remember(state, Action.STAY, 20.0, state, True)
        assert agent.get_episode_reward_history() == [29.0]
        assert agent.current_episode_reward == 0.0
        assert agent.episodes == 1

    def test_history_is_a_copy(self, agent, env):
        state = env.initial_state()
        agent.remember(state, Action.STAY, 20.0, state, True)
        agent.get_episode_reward_history().append(99.0)
        assert agent.get_episode_reward_history() == [20.0]


class TestTargets:
    """Test the masked Bellman targets."""

    def test_terminal_target_is_reward(self, agent):
        fill_memory(agent, 32, terminal=True)
        batch = list(agent.memory)
        states, targets = agent.compute_targets(batch)
        live = agent.live_net.predict(states)

        for i, t in enumerate(batch):
            assert targets[i, t.action.index] == pytest.approx(t.reward)
            others = [a for a in range(3) if a != t.action.index]
            np.testing.assert_array_equal(targets[i, others], live[i, others])

    def test_bootstrapped_target_uses_target_network(self, agent):
        fill_memory(agent, 32)
        # Make live and target disagree so the test can tell them apart
        agent.live_net.train_step(*agent.compute_targets(list(agent.memory)))

        batch = list(agent.memory)
        states, targets = agent.compute_targets(batch)
        next_states = np.stack([t.next_state.to_array() for t in batch])
        next_q = agent.target_net.predict(next_states).max(axis=1)

        for i, t in enumerate(batch):
            expected = t.reward + agent.gamma * next_q[i]
            assert targets[i, t.action.index] == pytest.approx(expected, rel=1e-5)


class TestReplay:
    """Test replay gating and target syncs."""

    def test_no_replay_before_batch_size(self, agent):
        fill_memory(agent, 31)
        assert agent.replay() is None
        assert agent.replay_steps == 0
        assert len(agent.losses) == 0

    def test_replay_trains_once_ready(self, agent):
        fill_memory(agent, 32)
        loss = agent.replay()
        assert loss is not None and loss >= 0.0
        assert agent.replay_steps == 1
        assert len(agent.losses) == 1

    def test_target_sync_cadence(self, agent, config):
        """Target equals live right after every TARGET_UPDATE-th replay, not before or after."""
        fill_memory(agent, 64)

        for _ in range(config.TARGET_UPDATE - 1):
            agent.replay()
        assert not agent.live_net.parameters_equal(agent.target_net)

        agent.replay()
        assert agent.replay_steps == config.TARGET_UPDATE
        assert agent.live_net.parameters_equal(agent.target_net)

        agent.replay()
        assert not agent.live_net.parameters_equal(agent.target_net)

    def test_target_unchanged_between_syncs(self, agent):
        fill_memory(agent, 64)
        frozen = agent.target_net.model.state_dict()
        frozen = {k: v.clone() for k, v in frozen.items()}
        for _ in range(5):
            agent.replay()
        current = agent.target_net.model.state_dict()
        assert all((current[k] == frozen[k]).all() for k in frozen)

    def test_average_loss(self, agent):
        assert agent.get_average_loss() == 0.0
        agent.losses.extend([1.0, 2.0, 3.0])
        assert agent.get_average_loss(2) == pytest.approx(2.5)
        assert agent.get_average_loss() == pytest.approx(2.0)


class TestHyperparamUpdate:
    """Test live hyperparameter changes."""

    def test_state_survives_update(self, agent, env):
        fill_memory(agent, 40)
        state = env.initial_state()
        agent.remember(state, Action.STAY, 20.0, state, True)
        for _ in range(3):
            agent.replay()

        memory_before = list(agent.memory)
        history_before = agent.get_episode_reward_history()

        agent.update_hyperparams(Hyperparams(epsilon=0.5, alpha=0.005, gamma=0.5, training_speed=3))

        assert list(agent.memory) == memory_before
        assert agent.get_episode_reward_history() == history_before
        assert agent.replay_steps == 3

    def test_new_values_used(self, agent):
        fill_memory(agent, 32)
        agent.update_hyperparams(agent.hyperparams.with_changes(alpha=0.005, gamma=0.0))

        assert agent.live_net.alpha == 0.005
        assert agent.live_net.optimizer.param_groups[0]['lr'] == 0.005
        assert agent.gamma == 0.0

        # gamma 0: targets collapse to the immediate reward
        batch = list(agent.memory)
        _, targets = agent.compute_targets(batch)
        for i, t in enumerate(batch):
            assert targets[i, t.action.index] == pytest.approx(t.reward)

    def test_update_logs_change(self, agent, caplog):
        import logging
        caplog.set_level(logging.INFO, logger='pongdqn')
        agent.update_hyperparams(agent.hyperparams.with_changes(epsilon=0.3))
        assert "epsilon: 0.1 -> 0.3" in caplog.text


class TestSeeding:
    """Same seeds, same decisions."""

    def test_seeded_agents_explore_identically(self, config, env):
        config.EPSILON = 1.0
        a = Agent(config, rng=random.Random(3))
        b = Agent(config, rng=random.Random(3))
        state = env.initial_state()
        assert [a.choose_action(state) for _ in range(20)] == [b.choose_action(state) for _ in range(20)]
