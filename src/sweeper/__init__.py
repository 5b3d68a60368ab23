"""
Minesweeper engine package.

Provides the board engine (mine placement, flood-fill reveal, chording,
win/loss lifecycle) and the small callers built on it.
"""
from .cell import Cell, CellState
from .board import (
    Board,
    BoardSnapshot,
    Difficulty,
    GameState,
    InvalidConfiguration,
    BEGINNER,
    INTERMEDIATE,
    EXPERT,
    PRESETS,
)
from .display import render_text, format_time, format_mine_count
from .highscores import HighScore, HighScoreManager
from .ticker import Ticker
from .environment import MinesweeperEnv

__all__ = [
    "Cell",
    "CellState",
    "Board",
    "BoardSnapshot",
    "Difficulty",
    "GameState",
    "InvalidConfiguration",
    "BEGINNER",
    "INTERMEDIATE",
    "EXPERT",
    "PRESETS",
    "render_text",
    "format_time",
    "format_mine_count",
    "HighScore",
    "HighScoreManager",
    "Ticker",
    "MinesweeperEnv",
]
