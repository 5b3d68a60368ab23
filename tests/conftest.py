"""
Pytest configuration and shared fixtures.
"""
import random
from typing import Callable, Iterable, List, Sequence, Tuple

import pytest
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sweeper import Board, Cell, Difficulty, BEGINNER


Position = Tuple[int, int]


# ============================================================================
# Scripted Mine Layouts
# ============================================================================

class ScriptedRandom(random.Random):
    """Random source whose sample() always returns a fixed mine layout."""

    def __init__(self, mines: Iterable[Position]) -> None:
        super().__init__(0)
        self.mines: List[Position] = list(mines)

    def sample(self, population: Sequence, k: int, **kwargs) -> list:
        assert k == len(self.mines)
        assert all(mine in population for mine in self.mines)
        return list(self.mines)


def make_board(width: int, height: int, mines: Iterable[Position]) -> Board:
    """Build a board whose first reveal lays out exactly these mines."""
    mines = list(mines)
    difficulty = Difficulty(width, height, len(mines))
    return Board(difficulty, rng=ScriptedRandom(mines))


@pytest.fixture
def scripted_random() -> Callable[[Iterable[Position]], ScriptedRandom]:
    """Factory for random sources with a fixed mine layout."""
    return ScriptedRandom


@pytest.fixture
def board_factory() -> Callable[[int, int, Iterable[Position]], Board]:
    """Factory for boards with a known mine layout."""
    return make_board


# ============================================================================
# Board Fixtures
# ============================================================================

@pytest.fixture
def default_board() -> Board:
    """Create a default 9x9 board with 10 mines."""
    return Board(rng=random.Random(1234))


@pytest.fixture
def beginner_board() -> Board:
    """Create a beginner difficulty board."""
    return Board(BEGINNER, rng=random.Random(99))


@pytest.fixture
def corner_mine_board() -> Board:
    """5x5 board with a single mine in the top-left corner."""
    return make_board(5, 5, [(0, 0)])


@pytest.fixture
def wall_board() -> Board:
    """
    5x5 board with a full column of mines at col 2.

    Revealing (0, 0) uncovers columns 0 and 1 only.
    """
    return make_board(5, 5, [(row, 2) for row in range(5)])


@pytest.fixture
def small_board() -> Board:
    """3x3 board with one mine at (0, 0)."""
    return make_board(3, 3, [(0, 0)])


# ============================================================================
# Cell Fixtures
# ============================================================================

@pytest.fixture
def hidden_cell() -> Cell:
    """Create a hidden cell."""
    return Cell()


@pytest.fixture
def mine_cell() -> Cell:
    """Create a cell containing a mine."""
    return Cell(is_mine=True)


@pytest.fixture
def numbered_cell() -> Cell:
    """Create a revealed cell with adjacent mines."""
    cell = Cell(adjacent_mines=3)
    cell.reveal()
    return cell


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def valid_config() -> Difficulty:
    """Create a valid board configuration."""
    return Difficulty(9, 9, 10)
