"""
Configuration file for Live Pong DQN
====================================

All hyperparameters, game settings, and visualization options are centralized here.
Modify these values to experiment with different training configurations.

Usage:
    from config import Config
    cfg = Config()
    print(cfg.LEARNING_RATE)
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Optional
import torch


@dataclass
class Config:
    """
    Central configuration for the entire project.

    Sections:
    1. Game Settings - Pong canvas, paddles and ball
    2. Neural Network - Architecture configuration
    3. Training - Learning hyperparameters
    4. Hyperparameter Controls - Live slider bounds
    5. Visualization - Display options
    6. System - Hardware, logging and paths
    """

    # =========================================================================
    # SCREEN SETTINGS
    # =========================================================================

    # Playfield (canvas) dimensions
    SCREEN_WIDTH: int = 600
    SCREEN_HEIGHT: int = 400

    # Side panel for the training HUD (visual mode only)
    HUD_WIDTH: int = 260

    # =========================================================================
    # PONG SETTINGS
    # =========================================================================

    # Human paddle sits on the left edge, agent paddle on the right edge
    PADDLE_WIDTH: int = 10
    PADDLE_HEIGHT: int = 60
    PADDLE_SPEED: int = 6

    # Ball is a square; its position is the top-left corner
    BALL_SIZE: int = 10
    BALL_SPEED: int = 5

    # Ball-tracking opponent (used when training is disabled)
    TRACKER_SPEED_FACTOR: float = 0.5
    TRACKER_DEADZONE: float = 10.0

    # Scripted human opponent for headless runs (fraction of PADDLE_SPEED)
    HEADLESS_HUMAN_SPEED_FACTOR: float = 0.6

    # Rewards assigned to the agent's action for one tick
    REWARD_HUMAN_RETURN: float = -1.0    # Human paddle returns the ball
    REWARD_AGENT_RETURN: float = 10.0    # Agent paddle returns the ball
    REWARD_AGENT_SCORES: float = 20.0    # Ball exits past the human side
    REWARD_HUMAN_SCORES: float = -20.0   # Ball exits past the agent side

    # Match rules
    WIN_SCORE: int = 11
    FPS: int = 60

    # =========================================================================
    # NEURAL NETWORK ARCHITECTURE
    # =========================================================================

    # State: ball (x, y), ball velocity (vx, vy), human paddle y, agent paddle y
    STATE_SIZE: int = 6

    # Action space
    ACTION_SIZE: int = 3      # MOVE_UP, STAY, MOVE_DOWN

    # Hidden layer architecture (dense + ReLU each, linear output)
    HIDDEN_LAYERS: List[int] = field(default_factory=lambda: [32, 32])

    # =========================================================================
    # TRAINING HYPERPARAMETERS
    # =========================================================================

    # Exploration rate for epsilon-greedy action selection
    EPSILON: float = 0.1

    # Learning rate (alpha) for the Adam optimizer
    LEARNING_RATE: float = 0.001

    # Discount factor (gamma) - How much to value future rewards
    GAMMA: float = 0.95

    # Replay calls per simulated tick
    TRAINING_SPEED: int = 1

    # Batch size - Number of experiences to sample per training step
    BATCH_SIZE: int = 32

    # Replay buffer capacity (oldest experiences are evicted first)
    MEMORY_SIZE: int = 2000

    # Copy live weights into the target network every N replay calls
    TARGET_UPDATE: int = 10

    # Number of recent losses kept for the HUD average
    LOSS_HISTORY: int = 1000

    # =========================================================================
    # HYPERPARAMETER CONTROLS
    # =========================================================================

    # Bounds enforced by the live controls: name -> (min, max, step)
    EPSILON_RANGE: Tuple[float, float, float] = (0.01, 1.0, 0.01)
    LEARNING_RATE_RANGE: Tuple[float, float, float] = (0.0001, 0.01, 0.0001)
    GAMMA_RANGE: Tuple[float, float, float] = (0.5, 0.99, 0.01)
    TRAINING_SPEED_RANGE: Tuple[int, int, int] = (1, 5, 1)

    # =========================================================================
    # VISUALIZATION SETTINGS
    # =========================================================================

    # Colors (RGB tuples)
    COLOR_BACKGROUND: Tuple[int, int, int] = (17, 17, 17)
    COLOR_CENTER_LINE: Tuple[int, int, int] = (68, 68, 68)
    COLOR_SCORE: Tuple[int, int, int] = (102, 102, 102)
    COLOR_HUMAN_PADDLE: Tuple[int, int, int] = (76, 175, 80)
    COLOR_AGENT_TRAINING: Tuple[int, int, int] = (255, 152, 0)
    COLOR_AGENT_TRACKING: Tuple[int, int, int] = (33, 150, 243)
    COLOR_BALL: Tuple[int, int, int] = (255, 255, 255)
    COLOR_TEXT: Tuple[int, int, int] = (255, 255, 255)
    COLOR_PANEL: Tuple[int, int, int] = (24, 24, 32)

    # Number of episodes shown in the reward chart
    PLOT_HISTORY_LENGTH: int = 100

    # =========================================================================
    # SYSTEM SETTINGS
    # =========================================================================

    # Force CPU device (the network is tiny, GPU transfer overhead dominates)
    FORCE_CPU: bool = True

    # Device selection
    @property
    def DEVICE(self) -> torch.device:
        """Auto-detect CUDA/MPS/CPU, or force CPU if configured."""
        if self.FORCE_CPU:
            return torch.device('cpu')
        if torch.cuda.is_available():
            return torch.device('cuda')
        elif hasattr(torch.backends, 'mps') and torch.backends.mps.is_available():
            return torch.device('mps')
        return torch.device('cpu')

    # Logging
    LOG_DIR: str = 'logs'
    LOG_LEVEL: str = 'INFO'
    LOG_TO_FILE: bool = True

    # Log a summary line every N finished episodes
    LOG_EVERY: int = 1

    # Random seed for reproducibility (None for random)
    SEED: Optional[int] = None

    def hyperparam_bounds(self) -> Dict[str, Tuple[float, float, float]]:
        """Slider bounds keyed by hyperparameter name."""
        return {
            'epsilon': self.EPSILON_RANGE,
            'alpha': self.LEARNING_RATE_RANGE,
            'gamma': self.GAMMA_RANGE,
            'training_speed': self.TRAINING_SPEED_RANGE,
        }

    def __post_init__(self):
        """Validation and derived calculations."""
        assert self.LEARNING_RATE > 0, "Learning rate must be positive"
        assert 0 < self.GAMMA <= 1, "Gamma must be in (0, 1]"
        assert 0 <= self.EPSILON <= 1, "Epsilon must be in [0, 1]"
        assert self.BATCH_SIZE > 0, "Batch size must be positive"
        assert self.MEMORY_SIZE >= self.BATCH_SIZE, "Memory must hold at least one batch"
        assert self.TARGET_UPDATE > 0, "Target update interval must be positive"
        assert self.TRAINING_SPEED >= 1, "Training speed must be at least 1"
        assert self.PADDLE_HEIGHT < self.SCREEN_HEIGHT, "Paddle must fit on screen"


# Global config instance for easy importing
config = Config()


if __name__ == "__main__":
    # Print configuration summary
    cfg = Config()
    print("=" * 60)
    print("Live Pong DQN - Configuration Summary")
    print("=" * 60)
    print(f"\nCanvas: {cfg.SCREEN_WIDTH}x{cfg.SCREEN_HEIGHT}")
    print(f"Paddle: {cfg.PADDLE_WIDTH}x{cfg.PADDLE_HEIGHT} @ {cfg.PADDLE_SPEED}px/tick")
    print(f"\nNeural Network:")
    print(f"   Input size: {cfg.STATE_SIZE}")
    print(f"   Hidden layers: {cfg.HIDDEN_LAYERS}")
    print(f"   Output size: {cfg.ACTION_SIZE}")
    print(f"\nTraining:")
    print(f"   Learning rate: {cfg.LEARNING_RATE}")
    print(f"   Batch size: {cfg.BATCH_SIZE}")
    print(f"   Gamma: {cfg.GAMMA}")
    print(f"   Epsilon: {cfg.EPSILON}")
    print(f"   Target sync: every {cfg.TARGET_UPDATE} replays")
    print(f"\nDevice: {cfg.DEVICE}")
    print("=" * 60)
