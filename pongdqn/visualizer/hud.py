"""
Training HUD (Heads-Up Display)
================================

Side panel showing the live hyperparameters and training progress, plus the
keyboard controls that adjust the hyperparameters while the match runs.
"""

import math
from typing import Dict, List, Optional, Tuple

import pygame

from config import Config

from ..ai.agent import Hyperparams

# key -> (hyperparameter name, step direction)
HYPERPARAM_KEYS: Dict[int, Tuple[str, int]] = {
    pygame.K_1: ('epsilon', -1),
    pygame.K_2: ('epsilon', 1),
    pygame.K_3: ('alpha', -1),
    pygame.K_4: ('alpha', 1),
    pygame.K_5: ('gamma', -1),
    pygame.K_6: ('gamma', 1),
    pygame.K_7: ('training_speed', -1),
    pygame.K_8: ('training_speed', 1),
}


class HyperparamControls:
    """
    Keyboard sliders for the live hyperparameters.

    Every change is clamped to the configured (min, max) range and snapped to
    the slider step, then returned as a new Hyperparams value. The caller
    forwards it to the agent.

    Example:
        >>> controls = HyperparamControls(config)
        >>> new = controls.handle_key(pygame.K_2, session.hyperparams)
        >>> if new is not None:
        ...     session.apply_hyperparams(new)
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.bounds = self.config.hyperparam_bounds()

    def adjust(self, hyperparams: Hyperparams, name: str, steps: int) -> Hyperparams:
        """
        Move one hyperparameter by a number of slider steps.

        Args:
            hyperparams: Current values
            name: 'epsilon', 'alpha', 'gamma' or 'training_speed'
            steps: Signed number of steps

        Returns:
            New Hyperparams (equal to the input when already at a bound)
        """
        if name not in self.bounds:
            raise KeyError(f"Unknown hyperparameter: {name}")

        low, high, step = self.bounds[name]
        value = getattr(hyperparams, name) + steps * step
        value = max(low, min(high, value))

        if name == 'training_speed':
            value = int(round(value))
        else:
            # Snap to the step grid so repeated presses don't drift
            decimals = max(0, -int(math.floor(math.log10(step))))
            value = round(round(value / step) * step, decimals)
            value = max(low, min(high, value))

        return hyperparams.with_changes(**{name: value})

    def handle_key(self, key: int, hyperparams: Hyperparams) -> Optional[Hyperparams]:
        """New Hyperparams for a control key, None for any other key or no change."""
        if key not in HYPERPARAM_KEYS:
            return None
        name, direction = HYPERPARAM_KEYS[key]
        updated = self.adjust(hyperparams, name, direction)
        return None if updated == hyperparams else updated


class TrainingHUD:
    """
    Training statistics panel drawn to the right of the table.

    Displays:
    - Current hyperparameters with their control keys
    - Replay steps and finished episodes
    - Last and average episode reward
    - Reward history chart
    - Network layout
    """

    def __init__(self, config: Config, x: int, width: int, height: int):
        """
        Initialize the HUD.

        Args:
            config: Configuration object
            x: Left edge of the panel
            width: Panel width
            height: Panel height
        """
        self.config = config
        self.x = x
        self.width = width
        self.height = height

        # Fonts
        self._font_small = pygame.font.Font(None, 18)
        self._font_medium = pygame.font.Font(None, 22)
        self._font_large = pygame.font.Font(None, 28)

        # Colors
        self.text_color = (220, 220, 220)
        self.text_dim = (150, 150, 150)
        self.accent_color = (52, 152, 219)  # Blue
        self.good_color = (46, 204, 113)  # Green
        self.bad_color = (231, 76, 60)  # Red
        self.grid_color = (35, 40, 55)

    def render(
        self,
        surface: pygame.Surface,
        hyperparams: Hyperparams,
        replay_steps: int,
        reward_history: List[float],
        training: bool,
        layer_info: Optional[List[Dict]] = None,
        average_loss: Optional[float] = None
    ) -> None:
        """
        Render the whole panel.

        Args:
            surface: Pygame surface to render onto
            hyperparams: Current hyperparameters
            replay_steps: Number of training replays so far
            reward_history: Per-episode reward totals
            training: Whether the learning agent is in control
            layer_info: DQN.get_layer_info() output
            average_loss: Recent average loss (None before the first replay)
        """
        pygame.draw.rect(surface, self.config.COLOR_PANEL, (self.x, 0, self.width, self.height))

        y = 12
        title = self._font_large.render("Live DQN", True, self.accent_color)
        surface.blit(title, (self.x + 12, y))
        status = "TRAINING" if training else "TRACKING"
        status_color = self.config.COLOR_AGENT_TRAINING if training else self.config.COLOR_AGENT_TRACKING
        status_surface = self._font_small.render(status, True, status_color)
        surface.blit(status_surface, (self.x + self.width - status_surface.get_width() - 12, y + 6))

        y = self._render_hyperparams(surface, hyperparams, y + 36)
        y = self._render_stats(surface, replay_steps, reward_history, average_loss, y + 10)

        chart_rect = pygame.Rect(self.x + 12, y + 8, self.width - 24, 110)
        self._render_reward_chart(surface, chart_rect, reward_history)

        if layer_info:
            self._render_layers(surface, layer_info, chart_rect.bottom + 14)

        self._render_help(surface)

    def _render_hyperparams(self, surface: pygame.Surface, hp: Hyperparams, y: int) -> int:
        """Hyperparameter rows with their key bindings. Returns the next free y."""
        rows = [
            ("Epsilon", f"{hp.epsilon:.2f}", "1/2"),
            ("Alpha", f"{hp.alpha:.4f}", "3/4"),
            ("Gamma", f"{hp.gamma:.2f}", "5/6"),
            ("Speed", f"{hp.training_speed}x", "7/8"),
        ]
        for label, value, keys in rows:
            surface.blit(self._font_medium.render(label, True, self.text_dim), (self.x + 12, y))
            surface.blit(self._font_medium.render(value, True, self.text_color), (self.x + 100, y))
            surface.blit(self._font_small.render(f"[{keys}]", True, self.text_dim),
                         (self.x + self.width - 44, y + 2))
            y += 22
        return y

    def _render_stats(
        self,
        surface: pygame.Surface,
        replay_steps: int,
        history: List[float],
        average_loss: Optional[float],
        y: int
    ) -> int:
        """Counters and reward summary. Returns the next free y."""
        last = history[-1] if history else 0.0
        recent = history[-10:]
        avg = sum(recent) / len(recent) if recent else 0.0

        rows = [
            ("Replays", f"{replay_steps:,}", self.text_color),
            ("Episodes", f"{len(history):,}", self.text_color),
            ("Last reward", f"{last:+.0f}", self.good_color if last >= 0 else self.bad_color),
            ("Avg (10)", f"{avg:+.1f}", self.good_color if avg >= 0 else self.bad_color),
        ]
        if average_loss is not None:
            rows.append(("Loss", f"{average_loss:.4f}", self.text_color))

        for label, value, color in rows:
            surface.blit(self._font_small.render(label, True, self.text_dim), (self.x + 12, y))
            surface.blit(self._font_small.render(value, True, color), (self.x + 100, y))
            y += 18
        return y

    def _render_reward_chart(self, surface: pygame.Surface, rect: pygame.Rect, history: List[float]) -> None:
        """Line chart of the most recent episode rewards."""
        pygame.draw.rect(surface, (8, 10, 18), rect, border_radius=5)
        pygame.draw.rect(surface, (40, 45, 60), rect, 1, border_radius=5)

        data = [v if math.isfinite(v) else 0.0 for v in history[-self.config.PLOT_HISTORY_LENGTH:]]
        if len(data) < 2:
            text = self._font_small.render("Collecting data...", True, (80, 80, 100))
            surface.blit(text, text.get_rect(center=rect.center))
            return

        low = min(min(data), 0.0)
        high = max(max(data), 0.0)
        span = max(high - low, 1.0)

        def to_y(value: float) -> int:
            return int(rect.bottom - 5 - (value - low) / span * (rect.height - 10))

        # Zero line
        zero_y = to_y(0.0)
        pygame.draw.line(surface, self.grid_color, (rect.left + 4, zero_y), (rect.right - 4, zero_y), 1)

        points = []
        for i, value in enumerate(data):
            x = rect.left + 4 + i / (len(data) - 1) * (rect.width - 8)
            points.append((int(x), to_y(value)))
        pygame.draw.lines(surface, self.good_color, False, points, 2)

    def _render_layers(self, surface: pygame.Surface, layer_info: List[Dict], y: int) -> None:
        """Network layout as 'Input 6 > Hidden 32 > ...'."""
        layout = " > ".join(str(layer['neurons']) for layer in layer_info)
        text = self._font_small.render(f"Net: {layout}", True, self.text_dim)
        surface.blit(text, (self.x + 12, y))

    def _render_help(self, surface: pygame.Surface) -> None:
        """Key reference at the bottom of the panel."""
        lines = ["UP/DOWN move   T train", "P pause   R reset   ESC quit"]
        y = self.height - 18 * len(lines) - 6
        for line in lines:
            surface.blit(self._font_small.render(line, True, self.text_dim), (self.x + 12, y))
            y += 18

