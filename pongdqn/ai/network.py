"""
Deep Q-Network (DQN) Architecture
=================================

The neural network that approximates Q-values for state-action pairs.

Theory:
    Q-Learning aims to learn Q(s, a) = expected future reward
    We use a neural network to approximate this function

    Input:  State vector (ball x/y, ball vx/vy, human paddle y, agent paddle y)
    Output: Q-value for each possible action (UP, STAY, DOWN)

The network learns by minimizing the squared TD (Temporal Difference) error:
    Loss = (Q(s,a) - (r + γ * max_a' Q_target(s', a')))²

Two pieces live here:
    DQN      - the torch module (6 -> 32 -> 32 -> 3, ReLU hidden, linear output)
    QNetwork - the function approximator the agent talks to: numpy in/out
               prediction, one Adam step per train_step, verbatim parameter
               copies for target-network syncs
"""

from typing import Dict, List, Optional

import numpy as np
import torch
import torch.nn as nn
import torch.nn.functional as F
import torch.optim as optim

from config import Config


class DQN(nn.Module):
    """
    Deep Q-Network for reinforcement learning.

    Architecture:
        Input Layer → Hidden Layers (ReLU) → Output Layer (linear)

    Example:
        >>> net = DQN(state_size=6, action_size=3, hidden_layers=[32, 32])
        >>> q_values = net(torch.randn(1, 6))  # Shape: (1, 3)
    """

    def __init__(
        self,
        state_size: int,
        action_size: int,
        config: Optional[Config] = None,
        hidden_layers: Optional[List[int]] = None
    ):
        """
        Initialize the DQN.

        Args:
            state_size: Dimension of state input
            action_size: Number of possible actions (output dimension)
            config: Configuration object
            hidden_layers: Override config's hidden layer sizes
        """
        super(DQN, self).__init__()

        self.config = config or Config()
        self.state_size = state_size
        self.action_size = action_size

        # Use provided hidden layers or config
        self.hidden_sizes = list(hidden_layers or self.config.HIDDEN_LAYERS)

        # Build network layers
        self.layers = nn.ModuleList()
        self._build_network()

        # Initialize weights
        self._init_weights()

    def _build_network(self) -> None:
        """Construct the neural network layers."""
        layer_sizes = [self.state_size] + self.hidden_sizes + [self.action_size]

        for i in range(len(layer_sizes) - 1):
            layer = nn.Linear(layer_sizes[i], layer_sizes[i + 1])
            self.layers.append(layer)

    def _init_weights(self) -> None:
        """
        Initialize weights using Xavier/Glorot initialization.
        This helps with training stability.
        """
        for layer in self.layers:
            if isinstance(layer, nn.Linear):
                nn.init.xavier_uniform_(layer.weight)
                nn.init.constant_(layer.bias, 0.0)

    def forward(self, state: torch.Tensor) -> torch.Tensor:
        """
        Forward pass through the network.

        Args:
            state: Input state tensor of shape (batch_size, state_size)

        Returns:
            Q-values tensor of shape (batch_size, action_size)
        """
        x = state

        for layer in self.layers[:-1]:
            x = F.relu(layer(x))

        # Output layer (no activation - raw Q-values)
        return self.layers[-1](x)

    def get_layer_info(self) -> List[Dict]:
        """
        Get information about each layer for display.

        Returns:
            List of dicts with layer metadata
        """
        info = [{'name': 'Input', 'neurons': self.state_size, 'type': 'input'}]

        for i, layer in enumerate(self.layers[:-1]):
            info.append({
                'name': f'Hidden {i + 1}',
                'neurons': layer.out_features,
                'type': 'hidden'
            })

        info.append({'name': 'Output', 'neurons': self.action_size, 'type': 'output'})
        return info

    def count_parameters(self) -> int:
        """Return total number of trainable parameters."""
        return sum(p.numel() for p in self.parameters() if p.requires_grad)


class QNetwork:
    """
    Function approximator wrapping a DQN module and its optimizer.

    The agent owns two instances: a live network trained every replay and
    a target network that only changes through `clone_parameters_into`.
    A target network is built with `alpha=None` and carries no optimizer.

    Example:
        >>> live = QNetwork(config, alpha=0.001)
        >>> target = QNetwork(config)
        >>> live.clone_parameters_into(target)
        >>> q = live.predict(states)            # (batch, 3) numpy array
        >>> loss = live.train_step(states, targets)
    """

    def __init__(self, config: Optional[Config] = None, alpha: Optional[float] = None):
        """
        Initialize the approximator.

        Args:
            config: Configuration object
            alpha: Adam learning rate; None for a frozen (target) network
        """
        self.config = config or Config()
        self.device = self.config.DEVICE
        self.model = DQN(
            self.config.STATE_SIZE,
            self.config.ACTION_SIZE,
            self.config
        ).to(self.device)

        self.alpha: Optional[float] = None
        self.optimizer: Optional[optim.Optimizer] = None
        if alpha is not None:
            self.rebuild_optimizer(alpha)
        else:
            self.model.eval()

    def _to_tensor(self, values: np.ndarray) -> torch.Tensor:
        """Float32 tensor on the network's device, always 2-D."""
        tensor = torch.as_tensor(np.asarray(values, dtype=np.float32), device=self.device)
        if tensor.dim() == 1:
            tensor = tensor.unsqueeze(0)
        return tensor

    def predict(self, states: np.ndarray) -> np.ndarray:
        """
        Q-values for a batch of states. Never touches the parameters.

        Args:
            states: Array of shape (batch, state_size) or (state_size,)

        Returns:
            Array of shape (batch, action_size)
        """
        with torch.inference_mode():
            q_values = self.model(self._to_tensor(states))
            return q_values.cpu().numpy()

    def train_step(self, states: np.ndarray, targets: np.ndarray) -> float:
        """
        One Adam update minimizing MSE between predictions and targets.

        Args:
            states: Array of shape (batch, state_size)
            targets: Array of shape (batch, action_size)

        Returns:
            Loss value before the update
        """
        if self.optimizer is None:
            raise RuntimeError("Cannot train a network built without a learning rate")

        states_t = self._to_tensor(states)
        targets_t = self._to_tensor(targets)

        predicted = self.model(states_t)
        loss = F.mse_loss(predicted, targets_t)

        self.optimizer.zero_grad()
        loss.backward()
        self.optimizer.step()

        return loss.item()

    def clone_parameters_into(self, other: 'QNetwork') -> None:
        """Overwrite `other`'s parameters with an exact copy of ours."""
        other.model.load_state_dict(self.model.state_dict())

    def rebuild_optimizer(self, alpha: float) -> None:
        """
        Replace the optimizer with a fresh Adam at the new learning rate.

        The moment estimates start from zero again, so frequent slider
        changes during a session can make training less stable.
        """
        self.alpha = alpha
        self.optimizer = optim.Adam(self.model.parameters(), lr=alpha)
        self.model.train()

    def parameters_equal(self, other: 'QNetwork') -> bool:
        """True if every parameter tensor matches `other` exactly."""
        mine = self.model.state_dict()
        theirs = other.model.state_dict()
        if mine.keys() != theirs.keys():
            return False
        return all(torch.equal(mine[k], theirs[k]) for k in mine)

    def count_parameters(self) -> int:
        """Return total number of trainable parameters."""
        return self.model.count_parameters()


# Testing
if __name__ == "__main__":
    config = Config()
    net = QNetwork(config, alpha=config.LEARNING_RATE)

    print("=" * 60)
    print("DQN Network Architecture")
    print("=" * 60)
    for i, info in enumerate(net.model.get_layer_info()):
        print(f"Layer {i}: {info['name']} - {info['neurons']} neurons ({info['type']})")
    print(f"\nTotal parameters: {net.count_parameters():,}")

    states = np.random.randn(32, config.STATE_SIZE).astype(np.float32)
    print(f"\nPredict output shape: {net.predict(states).shape}")
    print("=" * 60)
