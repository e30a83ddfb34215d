"""
AI Module
=========

Deep Reinforcement Learning components for live Pong training.

Classes:
    DQN             - Deep Q-Network neural network architecture
    QNetwork        - Function approximator (predict / train_step / clone)
    Agent           - DQN agent with epsilon-greedy exploration
    Hyperparams     - Live-tunable training knobs
    ReplayBuffer    - Experience replay memory
    TrainingSession - One live match: table, agent and score
"""

from .network import DQN, QNetwork
from .agent import Agent, Hyperparams
from .replay_buffer import ReplayBuffer, Transition
from .trainer import FrameGate, MatchScore, TickResult, TrainingMetrics, TrainingSession

__all__ = [
    'DQN', 'QNetwork', 'Agent', 'Hyperparams', 'ReplayBuffer', 'Transition',
    'FrameGate', 'MatchScore', 'TickResult', 'TrainingMetrics', 'TrainingSession',
]
