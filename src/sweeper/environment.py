"""
Gymnasium environment wrapper for the Minesweeper engine.

Lets automated players drive a Board through the standard RL interface.
"""
import random
from typing import Any, Dict, Optional, Tuple, SupportsFloat

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from .board import Board, Difficulty, BEGINNER
from .display import render_text


# ============================================================================
# Action Kinds
# ============================================================================

REVEAL = 0
FLAG = 1
CHORD = 2
ACTION_KINDS = (REVEAL, FLAG, CHORD)


# ============================================================================
# Minesweeper Environment
# ============================================================================

class MinesweeperEnv(gym.Env):
    """
    Gymnasium environment for Minesweeper.

    Observation:
        2D array where:
        - -1 = hidden cell
        - -2 = flagged cell
        - 0-8 = revealed cell with adjacent mine count
        - 9 = revealed mine

    Actions:
        Discrete action space of size 3 * width * height, one block per
        action kind. Within a block, index i is cell (i // width, i % width).
        Block 0 reveals, block 1 toggles a flag, block 2 chords.

    Rewards:
        - +1 for a safe reveal or chord
        - 0 for a flag toggle
        - +10 for winning the game
        - -10 for hitting a mine
        - -0.1 for a refused action
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 4}

    def __init__(
        self,
        difficulty: Optional[Difficulty] = None,
        render_mode: Optional[str] = None,
    ) -> None:
        """
        Initialize the Minesweeper environment.

        Args:
            difficulty: Board configuration (default: beginner).
            render_mode: How to render the environment.
        """
        super().__init__()

        self.difficulty = difficulty or BEGINNER
        self.board = Board(self.difficulty)
        self.render_mode = render_mode
        self._cells = self.difficulty.total_cells

        self.observation_space = spaces.Box(
            low=-2,
            high=9,
            shape=(self.difficulty.height, self.difficulty.width),
            dtype=np.int8,
        )
        self.action_space = spaces.Discrete(len(ACTION_KINDS) * self._cells)

        self._steps = 0

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """
        Reset the environment for a new episode.

        Args:
            seed: Random seed for mine placement.
            options: Additional options (unused).

        Returns:
            Tuple of (observation, info dict).
        """
        super().reset(seed=seed)
        self.board.rng = random.Random(int(self.np_random.integers(2**32)))
        self.board.reset()
        self._steps = 0

        return self.board.get_observation(), self._get_info()

    def step(
        self, action: int
    ) -> Tuple[np.ndarray, SupportsFloat, bool, bool, Dict[str, Any]]:
        """
        Execute one action in the environment.

        Args:
            action: kind * cells + row * width + col.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        kind, row, col = self.decode_action(action)
        self._steps += 1

        reward = self._apply(kind, row, col)

        observation = self.board.get_observation()
        terminated = self.board.is_finished
        truncated = False

        return observation, reward, terminated, truncated, self._get_info()

    def decode_action(self, action: int) -> Tuple[int, int, int]:
        """Convert flat action index to (kind, row, col)."""
        kind, index = divmod(int(action), self._cells)
        row, col = divmod(index, self.difficulty.width)
        return kind, row, col

    def encode_action(self, kind: int, row: int, col: int) -> int:
        """Convert (kind, row, col) to a flat action index."""
        return kind * self._cells + row * self.difficulty.width + col

    def _apply(self, kind: int, row: int, col: int) -> float:
        """Perform an action on the board and score the result."""
        if kind == REVEAL:
            accepted = self.board.reveal(row, col)
        elif kind == FLAG:
            accepted = self.board.toggle_flag(row, col)
        else:
            accepted = self.board.chord(row, col)

        if not accepted:
            return -0.1
        if self.board.is_won:
            return 10.0
        if self.board.is_lost:
            return -10.0
        if kind == FLAG:
            return 0.0
        return 1.0

    def _get_info(self) -> Dict[str, Any]:
        """Get info dictionary for current state."""
        obs = self.board.get_observation()
        return {
            "steps": self._steps,
            "revealed": int(np.count_nonzero((obs >= 0) & (obs <= 8))),
            "total_safe": self.difficulty.safe_cells,
            "game_state": self.board.game_state.name,
            "flags": self.board.flag_count,
            "remaining_mines": self.board.remaining_mines,
        }

    def render(self) -> Optional[str]:
        """Render the current board state."""
        if self.render_mode == "ansi":
            return render_text(self.board)
        if self.render_mode == "human":
            print(render_text(self.board))
        return None

    def get_action_mask(self) -> np.ndarray:
        """
        Get mask of actions the board would accept.

        Returns:
            Boolean array where True = valid action.
        """
        checks = {
            REVEAL: self.board.can_reveal,
            FLAG: self.board.can_toggle_flag,
            CHORD: self.board.can_chord,
        }
        mask = np.zeros(self.action_space.n, dtype=bool)
        for kind, check in checks.items():
            for row in range(self.difficulty.height):
                for col in range(self.difficulty.width):
                    if check(row, col):
                        mask[self.encode_action(kind, row, col)] = True
        return mask
