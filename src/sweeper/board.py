"""
Board module for the Minesweeper engine.

Implements the game board with lazy mine placement, flood-fill revealing,
chording, flag bookkeeping and the game lifecycle.
"""
import logging
import random
import threading
from collections import deque
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Callable, Deque, Dict, List, Optional, Tuple

import numpy as np

from .cell import Cell


logger = logging.getLogger(__name__)

Position = Tuple[int, int]
Listener = Callable[["Board"], None]


# ============================================================================
# Constants
# ============================================================================

class InvalidConfiguration(ValueError):
    """Raised when a difficulty describes a board that cannot be played."""


class GameState(Enum):
    """Lifecycle states of a game."""

    NOT_STARTED = auto()
    PLAYING = auto()
    WON = auto()
    LOST = auto()


@dataclass(frozen=True)
class Difficulty:
    """
    Configuration for a Minesweeper board.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        num_mines: Total mines to place.
        name: Display name, ignored for equality and hashing.
    """

    width: int = 9
    height: int = 9
    num_mines: int = 10
    name: str = field(default="Custom", compare=False)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.validate()

    def validate(self) -> None:
        """Ensure configuration values describe a playable board."""
        for value in (self.width, self.height, self.num_mines):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfiguration(
                    f"Board sizes must be integers, got {value!r}"
                )
        if self.width < 1 or self.height < 1:
            raise InvalidConfiguration("Board dimensions must be positive")
        if self.num_mines < 1:
            raise InvalidConfiguration("Board needs at least one mine")
        max_mines = self.width * self.height - 1
        if self.num_mines > max_mines:
            raise InvalidConfiguration(f"Too many mines (max {max_mines})")

    @property
    def total_cells(self) -> int:
        return self.width * self.height

    @property
    def safe_cells(self) -> int:
        """Number of cells that must be revealed to win."""
        return self.total_cells - self.num_mines

    @property
    def key(self) -> str:
        """Stable identifier, e.g. ``9x9x10``."""
        return f"{self.width}x{self.height}x{self.num_mines}"

    @classmethod
    def preset(cls, name: str) -> "Difficulty":
        """Look up a preset difficulty by (case-insensitive) name."""
        try:
            return PRESETS[name.lower()]
        except KeyError:
            raise InvalidConfiguration(f"Unknown difficulty: {name}") from None


# Preset difficulty levels
BEGINNER = Difficulty(9, 9, 10, "Beginner")
INTERMEDIATE = Difficulty(16, 16, 40, "Intermediate")
EXPERT = Difficulty(30, 16, 99, "Expert")

PRESETS: Dict[str, Difficulty] = {
    "beginner": BEGINNER,
    "intermediate": INTERMEDIATE,
    "expert": EXPERT,
}


@dataclass(frozen=True)
class BoardSnapshot:
    """
    Detached copy of everything a presentation layer needs.

    The snapshot cannot be reassigned and never shares cells with the
    board, but the copied Cell values themselves are plain mutable
    dataclasses. Editing them changes only this snapshot.
    """

    difficulty: Difficulty
    cells: Tuple[Tuple[Cell, ...], ...]
    game_state: GameState
    flag_count: int
    remaining_mines: int
    elapsed_time: int

    def cell_at(self, row: int, col: int) -> Cell:
        return self.cells[row][col]

    def get_observation(self) -> np.ndarray:
        """Observation array with the same encoding as Board.get_observation."""
        obs = np.zeros(
            (self.difficulty.height, self.difficulty.width), dtype=np.int8
        )
        for row, cells in enumerate(self.cells):
            for col, cell in enumerate(cells):
                obs[row, col] = cell.to_observation()
        return obs


# ============================================================================
# Board Class
# ============================================================================

@dataclass
class Board:
    """
    Minesweeper game engine.

    Manages the grid of cells, mine placement, revealing logic, flags,
    the elapsed-time counter and win/lose conditions.

    Every public operation holds a re-entrant lock, so one board can be
    shared between a UI thread and a timer thread. Guard violations are
    reported by returning False, never by raising.
    """

    difficulty: Difficulty = field(default_factory=lambda: BEGINNER)
    rng: random.Random = field(
        default_factory=random.Random, repr=False, compare=False
    )
    _grid: List[List[Cell]] = field(default_factory=list, repr=False)
    _game_state: GameState = GameState.NOT_STARTED
    _first_move: bool = True
    _flag_count: int = 0
    _elapsed_time: int = 0
    _revealed_safe: int = 0
    _lock: threading.RLock = field(
        default_factory=threading.RLock, repr=False, compare=False
    )
    _listeners: List[Listener] = field(
        default_factory=list, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        """Validate the difficulty and build the empty grid."""
        self.difficulty.validate()
        self._start_new_game()

    # ========================================================================
    # Grid Initialization (Low-level)
    # ========================================================================

    def _start_new_game(self) -> None:
        """Discard the grid and counters and return to NOT_STARTED."""
        self._init_grid()
        self._game_state = GameState.NOT_STARTED
        self._first_move = True
        self._flag_count = 0
        self._elapsed_time = 0
        self._revealed_safe = 0

    def _init_grid(self) -> None:
        """Create empty grid of cells."""
        self._grid = [
            [Cell() for _ in range(self.difficulty.width)]
            for _ in range(self.difficulty.height)
        ]

    def _place_mines(self, exclude: Position) -> None:
        """
        Place mines randomly, excluding a specific cell.

        Args:
            exclude: (row, col) position to keep mine-free.
        """
        positions = self._get_valid_mine_positions(exclude)
        mine_positions = self.rng.sample(positions, self.difficulty.num_mines)
        for row, col in mine_positions:
            self._grid[row][col].is_mine = True
        logger.debug(
            "Placed %d mines on %dx%d board avoiding %s",
            self.difficulty.num_mines,
            self.difficulty.width,
            self.difficulty.height,
            exclude,
        )

    def _get_valid_mine_positions(self, exclude: Position) -> List[Position]:
        """Get all valid positions for mine placement."""
        positions = []
        for row in range(self.difficulty.height):
            for col in range(self.difficulty.width):
                if (row, col) != exclude:
                    positions.append((row, col))
        return positions

    def _calculate_adjacent_mines(self) -> None:
        """Calculate adjacent mine counts for all cells."""
        for row in range(self.difficulty.height):
            for col in range(self.difficulty.width):
                if not self._grid[row][col].is_mine:
                    count = self._count_adjacent_mines(row, col)
                    self._grid[row][col].adjacent_mines = count

    def _count_adjacent_mines(self, row: int, col: int) -> int:
        """Count mines adjacent to a specific cell."""
        count = 0
        for neighbor_row, neighbor_col in self._get_neighbors(row, col):
            if self._grid[neighbor_row][neighbor_col].is_mine:
                count += 1
        return count

    # ========================================================================
    # Neighbor Utilities (Low-level)
    # ========================================================================

    def _get_neighbors(self, row: int, col: int) -> List[Position]:
        """
        Get valid neighboring cell positions.

        Args:
            row: Row index of center cell.
            col: Column index of center cell.

        Returns:
            List of (row, col) tuples for valid neighbors.
        """
        neighbors = []
        for delta_row in (-1, 0, 1):
            for delta_col in (-1, 0, 1):
                if delta_row == 0 and delta_col == 0:
                    continue
                new_row = row + delta_row
                new_col = col + delta_col
                if self._is_valid_position(new_row, new_col):
                    neighbors.append((new_row, new_col))
        return neighbors

    def _is_valid_position(self, row: int, col: int) -> bool:
        """Check if position is within board bounds."""
        return (
            0 <= row < self.difficulty.height
            and 0 <= col < self.difficulty.width
        )

    def _count_adjacent_flags(self, row: int, col: int) -> int:
        """Count flagged cells adjacent to position."""
        count = 0
        for neighbor_row, neighbor_col in self._get_neighbors(row, col):
            if self._grid[neighbor_row][neighbor_col].is_flagged:
                count += 1
        return count

    def _is_active(self) -> bool:
        return self._game_state in (GameState.NOT_STARTED, GameState.PLAYING)

    # ========================================================================
    # Game Actions (Mid-level)
    # ========================================================================

    def reset(self, difficulty: Optional[Difficulty] = None) -> None:
        """
        Start a new game, optionally with a different difficulty.

        Mines are not placed until the first reveal.

        Args:
            difficulty: New configuration; keeps the current one if None.

        Raises:
            InvalidConfiguration: If the difficulty is degenerate. The
                board is left exactly as it was.
        """
        with self._lock:
            new_difficulty = self.difficulty if difficulty is None else difficulty
            new_difficulty.validate()
            self.difficulty = new_difficulty
            self._start_new_game()
            logger.debug("New %s game", new_difficulty.key)
            self._notify()

    def change_difficulty(self, difficulty: Difficulty) -> None:
        """Switch to another difficulty, discarding the current game."""
        self.reset(difficulty)

    def reveal(self, row: int, col: int) -> bool:
        """
        Reveal a cell at the given position.

        On first reveal, places mines avoiding this cell and starts play.
        If the cell is empty (0 adjacent mines), its connected empty region
        and the numbered cells bordering it are revealed too. If the cell
        is a mine, the game is lost and every mine is exposed.

        Args:
            row: Row index to reveal.
            col: Column index to reveal.

        Returns:
            True if reveal was accepted, False otherwise.
        """
        with self._lock:
            if not self.can_reveal(row, col):
                return False

            if self._first_move:
                self._handle_first_move(row, col)

            if self._grid[row][col].is_mine:
                self._lose()
            else:
                self._flood_reveal(row, col)
                self._check_win_condition()

            self._notify()
            return True

    def _handle_first_move(self, row: int, col: int) -> None:
        """Handle first reveal: place mines, calculate counts, start play."""
        self._first_move = False
        self._place_mines((row, col))
        self._calculate_adjacent_mines()
        self._game_state = GameState.PLAYING

    def _flood_reveal(self, row: int, col: int) -> None:
        """Reveal a safe cell and expand through zero-count neighbors."""
        pending: Deque[Position] = deque([(row, col)])
        while pending:
            current_row, current_col = pending.popleft()
            cell = self._grid[current_row][current_col]
            if not cell.reveal():
                continue
            self._revealed_safe += 1
            if cell.adjacent_mines > 0:
                continue
            for neighbor_row, neighbor_col in self._get_neighbors(
                current_row, current_col
            ):
                if self._grid[neighbor_row][neighbor_col].is_hidden:
                    pending.append((neighbor_row, neighbor_col))

    def _lose(self) -> None:
        """End the game and expose every mine, keeping flags."""
        self._game_state = GameState.LOST
        for row in self._grid:
            for cell in row:
                if cell.is_mine:
                    cell.is_revealed = True
        logger.info("Game lost after %d seconds", self._elapsed_time)

    def _check_win_condition(self) -> None:
        """Win once all non-mine cells are revealed, then flag the mines."""
        if self._game_state != GameState.PLAYING:
            return
        if self._revealed_safe != self.difficulty.safe_cells:
            return

        self._game_state = GameState.WON
        for row in self._grid:
            for cell in row:
                if cell.is_mine and not cell.is_flagged:
                    cell.is_flagged = True
                    self._flag_count += 1
        logger.info("Game won in %d seconds", self._elapsed_time)

    def toggle_flag(self, row: int, col: int) -> bool:
        """
        Toggle flag on a cell.

        Placing a flag is refused once flag_count reaches the mine count.

        Args:
            row: Row index.
            col: Column index.

        Returns:
            True if flag was toggled, False otherwise.
        """
        with self._lock:
            if not self.can_toggle_flag(row, col):
                return False

            cell = self._grid[row][col]
            cell.toggle_flag()
            self._flag_count += 1 if cell.is_flagged else -1

            # Flags alone never satisfy the win condition; re-checked for
            # parity with reveal and chord.
            self._check_win_condition()
            self._notify()
            return True

    def chord(self, row: int, col: int) -> bool:
        """
        Chord action: reveal all unflagged neighbors if flag count matches.

        Args:
            row: Row index.
            col: Column index.

        Returns:
            True if chord was performed, False otherwise.
        """
        with self._lock:
            if not self.can_chord(row, col):
                return False

            for neighbor_row, neighbor_col in self._get_neighbors(row, col):
                neighbor = self._grid[neighbor_row][neighbor_col]
                if not neighbor.is_hidden:
                    continue
                if neighbor.is_mine:
                    self._lose()
                    break
                self._flood_reveal(neighbor_row, neighbor_col)
            else:
                self._check_win_condition()

            self._notify()
            return True

    def flag_or_chord(self, row: int, col: int) -> bool:
        """Chord a revealed numbered cell, otherwise toggle its flag."""
        with self._lock:
            if not self._is_valid_position(row, col):
                return False
            cell = self._grid[row][col]
            if cell.is_revealed and cell.adjacent_mines > 0:
                return self.chord(row, col)
            return self.toggle_flag(row, col)

    def tick(self) -> bool:
        """
        Advance the clock by one second while the game is in progress.

        Returns:
            True if elapsed time changed.
        """
        with self._lock:
            if self._game_state != GameState.PLAYING:
                return False
            self._elapsed_time += 1
            self._notify()
            return True

    # ========================================================================
    # Change Notification
    # ========================================================================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback invoked after every accepted mutation.

        Listeners run while the board lock is held, so they see a
        consistent board and may query it freely.

        Returns:
            Function that removes the listener again.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @property
    def lock(self) -> threading.RLock:
        """Lock serializing all mutations; hold it to check-then-act atomically."""
        return self._lock

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ========================================================================
    # State Accessors (High-level)
    # ========================================================================

    @property
    def width(self) -> int:
        return self.difficulty.width

    @property
    def height(self) -> int:
        return self.difficulty.height

    @property
    def game_state(self) -> GameState:
        """Get current game state."""
        return self._game_state

    @property
    def is_playing(self) -> bool:
        """Check if game is in progress (mines placed, not finished)."""
        return self._game_state == GameState.PLAYING

    @property
    def is_won(self) -> bool:
        """Check if game was won."""
        return self._game_state == GameState.WON

    @property
    def is_lost(self) -> bool:
        """Check if game was lost."""
        return self._game_state == GameState.LOST

    @property
    def is_finished(self) -> bool:
        return self._game_state in (GameState.WON, GameState.LOST)

    @property
    def is_first_move(self) -> bool:
        return self._first_move

    @property
    def flag_count(self) -> int:
        return self._flag_count

    @property
    def remaining_mines(self) -> int:
        """Mines minus flags; negative when over-flagged."""
        return self.difficulty.num_mines - self._flag_count

    @property
    def elapsed_time(self) -> int:
        """Seconds counted by tick() while playing."""
        return self._elapsed_time

    def can_reveal(self, row: int, col: int) -> bool:
        """Check if a cell can be revealed."""
        with self._lock:
            if not self._is_active():
                return False
            if not self._is_valid_position(row, col):
                return False
            return self._grid[row][col].is_hidden

    def can_toggle_flag(self, row: int, col: int) -> bool:
        """Check if a flag can be placed on or removed from a cell."""
        with self._lock:
            if not self._is_active():
                return False
            if not self._is_valid_position(row, col):
                return False
            cell = self._grid[row][col]
            if cell.is_revealed:
                return False
            return cell.is_flagged or self._flag_count < self.difficulty.num_mines

    def can_chord(self, row: int, col: int) -> bool:
        """Check if a chord on this cell would reveal anything."""
        with self._lock:
            if not self._is_active():
                return False
            if not self._is_valid_position(row, col):
                return False
            cell = self._grid[row][col]
            if not cell.is_revealed or cell.adjacent_mines == 0:
                return False
            if self._count_adjacent_flags(row, col) != cell.adjacent_mines:
                return False
            return any(
                self._grid[neighbor_row][neighbor_col].is_hidden
                for neighbor_row, neighbor_col in self._get_neighbors(row, col)
            )

    def get_cell(self, row: int, col: int) -> Optional[Cell]:
        """Get a copy of the cell at position, or None if invalid."""
        with self._lock:
            if not self._is_valid_position(row, col):
                return None
            return replace(self._grid[row][col])

    def get_observation(self) -> np.ndarray:
        """
        Get board state as numpy array.

        Returns:
            2D numpy array where:
                -1 = hidden
                -2 = flagged
                0-8 = revealed with adjacent count
                9 = revealed mine
        """
        with self._lock:
            obs = np.zeros((self.height, self.width), dtype=np.int8)
            for row in range(self.height):
                for col in range(self.width):
                    obs[row, col] = self._grid[row][col].to_observation()
            return obs

    def get_hidden_positions(self) -> List[Position]:
        """
        Get list of cells that can still be revealed.

        Returns:
            List of (row, col) positions that are neither revealed nor flagged.
        """
        with self._lock:
            positions = []
            for row in range(self.height):
                for col in range(self.width):
                    if self._grid[row][col].is_hidden:
                        positions.append((row, col))
            return positions

    def snapshot(self) -> BoardSnapshot:
        """Copy the current board and counters into an immutable snapshot."""
        with self._lock:
            cells = tuple(
                tuple(replace(cell) for cell in row) for row in self._grid
            )
            return BoardSnapshot(
                difficulty=self.difficulty,
                cells=cells,
                game_state=self._game_state,
                flag_count=self._flag_count,
                remaining_mines=self.remaining_mines,
                elapsed_time=self._elapsed_time,
            )
