"""
Tests for the DQN network and the QNetwork function approximator.

These tests verify:
    - Network architecture (6 -> 32 -> 32 -> 3)
    - Prediction shapes and that prediction never trains
    - Optimizer handling for live and target networks
    - Verbatim parameter copies
    - Masked targets only move the taken action's output
"""

import numpy as np
import pytest
import torch
import torch.nn.functional as F

from pongdqn.ai.network import DQN, QNetwork


@pytest.fixture
def states():
    return np.random.default_rng(0).normal(size=(8, 6)).astype(np.float32)


class TestDQNArchitecture:
    """Test the torch module."""

    def test_output_shape(self):
        net = DQN(state_size=6, action_size=3, hidden_layers=[32, 32])
        assert net(torch.randn(5, 6)).shape == (5, 3)

    def test_layer_info(self, config):
        net = DQN(6, 3, config)
        info = net.get_layer_info()
        assert [layer['neurons'] for layer in info] == [6, 32, 32, 3]
        assert info[0]['type'] == 'input'
        assert info[-1]['type'] == 'output'

    def test_parameter_count(self, config):
        """(6*32 + 32) + (32*32 + 32) + (32*3 + 3)."""
        assert DQN(6, 3, config).count_parameters() == 1379

    def test_hidden_layer_override(self, config):
        net = DQN(6, 3, config, hidden_layers=[16])
        assert [layer['neurons'] for layer in net.get_layer_info()] == [6, 16, 3]

    def test_biases_start_at_zero(self, config):
        net = DQN(6, 3, config)
        for layer in net.layers:
            assert torch.all(layer.bias == 0)


class TestQNetworkPredict:
    """Test prediction."""

    def test_batch_shape(self, config, states):
        net = QNetwork(config, alpha=0.001)
        assert net.predict(states).shape == (8, 3)

    def test_single_state_is_batched(self, config, states):
        net = QNetwork(config, alpha=0.001)
        assert net.predict(states[0]).shape == (1, 3)

    def test_predict_returns_numpy(self, config, states):
        assert isinstance(QNetwork(config).predict(states), np.ndarray)

    def test_predict_does_not_change_parameters(self, config, states):
        net = QNetwork(config, alpha=0.001)
        snapshot = QNetwork(config)
        net.clone_parameters_into(snapshot)
        for _ in range(5):
            net.predict(states)
        assert net.parameters_equal(snapshot)


class TestQNetworkTraining:
    """Test the optimizer and train_step."""

    def test_target_network_cannot_train(self, config, states):
        net = QNetwork(config)
        assert net.optimizer is None
        with pytest.raises(RuntimeError):
            net.train_step(states, np.zeros((8, 3), dtype=np.float32))

    def test_train_step_changes_parameters(self, config, states):
        net = QNetwork(config, alpha=0.01)
        before = QNetwork(config)
        net.clone_parameters_into(before)
        net.train_step(states, np.ones((8, 3), dtype=np.float32))
        assert not net.parameters_equal(before)

    def test_loss_decreases_on_fixed_targets(self, config, states):
        net = QNetwork(config, alpha=0.01)
        targets = np.full((8, 3), 2.0, dtype=np.float32)
        first = net.train_step(states, targets)
        for _ in range(100):
            last = net.train_step(states, targets)
        assert last < first

    def test_rebuild_optimizer_sets_learning_rate(self, config):
        net = QNetwork(config, alpha=0.001)
        old_optimizer = net.optimizer
        net.rebuild_optimizer(0.005)
        assert net.alpha == 0.005
        assert net.optimizer is not old_optimizer
        assert net.optimizer.param_groups[0]['lr'] == 0.005

    def test_masked_target_gradient_only_on_taken_action(self, config, states):
        """Slots equal to the prediction contribute zero gradient."""
        net = QNetwork(config, alpha=0.001)
        actions = np.array([0, 1, 2, 0, 1, 2, 0, 1])

        targets = net.predict(states)
        targets[np.arange(8), actions] += 5.0

        output = net.model(torch.as_tensor(states))
        output.retain_grad()
        F.mse_loss(output, torch.as_tensor(targets)).backward()

        grad = output.grad.numpy()
        mask = np.zeros_like(grad, dtype=bool)
        mask[np.arange(8), actions] = True
        np.testing.assert_array_equal(grad[~mask], 0.0)
        assert np.all(grad[mask] != 0.0)


class TestParameterCopy:
    """Test target-network syncs."""

    def test_fresh_networks_differ(self, config):
        assert not QNetwork(config).parameters_equal(QNetwork(config))

    def test_clone_makes_identical(self, config, states):
        live = QNetwork(config, alpha=0.001)
        target = QNetwork(config)
        live.clone_parameters_into(target)
        assert live.parameters_equal(target)
        np.testing.assert_array_equal(live.predict(states), target.predict(states))

    def test_clone_is_a_copy(self, config, states):
        """Training the source after a clone leaves the copy alone."""
        live = QNetwork(config, alpha=0.01)
        target = QNetwork(config)
        live.clone_parameters_into(target)
        live.train_step(states, np.ones((8, 3), dtype=np.float32))
        assert not live.parameters_equal(target)
