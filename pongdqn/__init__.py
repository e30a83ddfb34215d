"""
Live Pong DQN - Source Package
==============================

This package contains all the components for training a Pong paddle
online against a live human opponent.

Modules:
    game/       - Pong physics and reward environment
    ai/         - Q-network, replay memory, agent and training session
    visualizer/ - Board rendering and training HUD
    utils/      - Logging helpers
"""

__version__ = "1.0.0"
