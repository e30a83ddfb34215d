"""
Pong Renderer
=============

Draws the live table: centre line, scores, paddles, ball, the training
indicator and the game-over overlay.

The renderer only reads GameState and MatchScore values; it never touches
the simulation.
"""

from typing import Optional

import pygame

from config import Config

from ..ai.trainer import AI, PLAYER, MatchScore
from ..game.pong import GameState


class PongRenderer:
    """
    Retro Pong board renderer.

    Example:
        >>> renderer = PongRenderer(config)
        >>> renderer.render(screen, session.state, session.score, training=True)
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize the renderer.

        Args:
            config: Configuration object
        """
        self.config = config or Config()
        self.width = self.config.SCREEN_WIDTH
        self.height = self.config.SCREEN_HEIGHT

        self._font = pygame.font.Font(None, 48)
        self._label_font = pygame.font.Font(None, 22)
        self._small_font = pygame.font.Font(None, 18)

    def render(
        self,
        surface: pygame.Surface,
        state: GameState,
        score: MatchScore,
        training: bool,
        winner: Optional[str] = None,
        paused: bool = False
    ) -> None:
        """
        Render one frame of the table.

        Args:
            surface: Pygame surface to draw on (table occupies its top-left)
            state: Current table state
            score: Current match score
            training: Whether the learning agent is in control
            winner: PLAYER, AI or None while the match is running
            paused: Draw the pause banner
        """
        cfg = self.config
        board = pygame.Rect(0, 0, self.width, self.height)
        pygame.draw.rect(surface, cfg.COLOR_BACKGROUND, board)

        self._render_center_line(surface)
        self._render_scores(surface, score)

        # Human paddle (left)
        pygame.draw.rect(
            surface, cfg.COLOR_HUMAN_PADDLE,
            (0, int(state.paddle_y), cfg.PADDLE_WIDTH, cfg.PADDLE_HEIGHT)
        )

        # Agent paddle (right) - colour shows who is driving it
        agent_color = cfg.COLOR_AGENT_TRAINING if training else cfg.COLOR_AGENT_TRACKING
        pygame.draw.rect(
            surface, agent_color,
            (self.width - cfg.PADDLE_WIDTH, int(state.agent_paddle_y), cfg.PADDLE_WIDTH, cfg.PADDLE_HEIGHT)
        )

        pygame.draw.rect(
            surface, cfg.COLOR_BALL,
            (int(state.ball_x), int(state.ball_y), cfg.BALL_SIZE, cfg.BALL_SIZE)
        )

        if training:
            label = self._small_font.render("AI TRAINING", True, cfg.COLOR_AGENT_TRAINING)
            surface.blit(label, (self.width - label.get_width() - 10, self.height - 22))

        if paused and winner is None:
            self._render_banner(surface, "PAUSED", cfg.COLOR_TEXT)

        if winner is not None:
            self._render_game_over(surface, score, winner)

    def _render_center_line(self, surface: pygame.Surface) -> None:
        """Dashed net down the middle."""
        center_x = self.width // 2
        dash_height = 15
        dash_gap = 10
        for y in range(0, self.height, dash_height + dash_gap):
            pygame.draw.rect(surface, self.config.COLOR_CENTER_LINE, (center_x - 2, y, 4, dash_height))

    def _render_scores(self, surface: pygame.Surface, score: MatchScore) -> None:
        """Player score on the left half, AI score on the right half."""
        color = self.config.COLOR_SCORE

        player_label = self._label_font.render("YOU", True, color)
        surface.blit(player_label, (self.width // 4 - player_label.get_width() // 2, 12))
        player_text = self._font.render(str(score.player), True, color)
        surface.blit(player_text, (self.width // 4 - player_text.get_width() // 2, 30))

        ai_label = self._label_font.render("AI", True, color)
        surface.blit(ai_label, (3 * self.width // 4 - ai_label.get_width() // 2, 12))
        ai_text = self._font.render(str(score.ai), True, color)
        surface.blit(ai_text, (3 * self.width // 4 - ai_text.get_width() // 2, 30))

    def _render_banner(self, surface: pygame.Surface, message: str, color) -> None:
        """Centered message on a translucent strip."""
        strip = pygame.Surface((self.width, 70), pygame.SRCALPHA)
        strip.fill((0, 0, 0, 170))
        surface.blit(strip, (0, self.height // 2 - 35))

        text = self._font.render(message, True, color)
        surface.blit(text, text.get_rect(center=(self.width // 2, self.height // 2)))

    def _render_game_over(self, surface: pygame.Surface, score: MatchScore, winner: str) -> None:
        """Winner message, final score and restart hint."""
        if winner == PLAYER:
            self._render_banner(surface, "YOU WIN!", self.config.COLOR_HUMAN_PADDLE)
        elif winner == AI:
            self._render_banner(surface, "AI WINS!", self.config.COLOR_AGENT_TRAINING)

        final = self._small_font.render(
            f"Final: {score.player} - {score.ai}   (R to play again)",
            True, (200, 200, 200)
        )
        surface.blit(final, (self.width // 2 - final.get_width() // 2, self.height // 2 + 42))
