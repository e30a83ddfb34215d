"""
Game Module
===========

Pong table physics and the agent's reward model.

Classes:
    PongEnvironment - Pure state transition + reward function
    GameState       - Immutable 6-field table snapshot
    Action          - Agent paddle command (UP / STAY / DOWN)
    StepResult      - (next_state, reward, terminal, event) tuple
    StepEvent       - What happened to the ball during a tick
"""

from .pong import (
    ACTION_LABELS,
    Action,
    GameState,
    PongEnvironment,
    StepEvent,
    StepResult,
)

__all__ = [
    'ACTION_LABELS',
    'Action',
    'GameState',
    'PongEnvironment',
    'StepEvent',
    'StepResult',
]
