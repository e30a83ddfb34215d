"""
Visualizer Module
=================

Real-time rendering of the live training match.

Classes:
    PongRenderer       - Draws the table, scores and game-over overlay
    TrainingHUD        - Side panel with hyperparameters and reward chart
    HyperparamControls - Keyboard sliders for the live hyperparameters
"""

from .renderer import PongRenderer
from .hud import HYPERPARAM_KEYS, HyperparamControls, TrainingHUD

__all__ = ['PongRenderer', 'TrainingHUD', 'HyperparamControls', 'HYPERPARAM_KEYS']
