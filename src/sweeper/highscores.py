"""
High score persistence.

Keeps the best winning time per difficulty in a JSON file. The engine
never touches this store; callers offer a time once per win.
"""
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Union

from .board import Difficulty
from .display import format_time


logger = logging.getLogger(__name__)


# ============================================================================
# High Score Record
# ============================================================================

@dataclass(frozen=True)
class HighScore:
    """
    Best time achieved on one difficulty.

    Attributes:
        time: Winning time in seconds.
        difficulty: Difficulty key, e.g. ``9x9x10``.
        date: When the record was set.
    """

    time: int
    difficulty: str
    date: datetime

    @property
    def formatted_time(self) -> str:
        return format_time(self.time)

    def to_dict(self) -> Dict[str, Union[int, str]]:
        """Convert to dictionary for serialization."""
        return {
            "time": self.time,
            "difficulty": self.difficulty,
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Union[int, str]]) -> "HighScore":
        return cls(
            time=int(data["time"]),
            difficulty=str(data["difficulty"]),
            date=datetime.fromisoformat(str(data["date"])),
        )


# ============================================================================
# High Score Manager
# ============================================================================

class HighScoreManager:
    """
    Loads, checks and saves best times.

    A missing file means no records yet. A file that cannot be parsed is
    logged and treated as empty; it is overwritten on the next record.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        """
        Initialize the manager and load existing records.

        Args:
            path: JSON file holding the records.
        """
        self.path = Path(path)
        self._scores: Dict[str, HighScore] = {}
        self._load()

    def check_and_save(
        self,
        time: int,
        difficulty: Difficulty,
        date: Optional[datetime] = None,
    ) -> bool:
        """
        Record a winning time if it beats the current best.

        Args:
            time: Winning time in seconds.
            difficulty: Difficulty the game was played on.
            date: Timestamp for the record (default: now).

        Returns:
            True if the time is a new record.
        """
        current_best = self._scores.get(difficulty.key)
        if current_best is not None and time >= current_best.time:
            return False

        scores = dict(self._scores)
        scores[difficulty.key] = HighScore(
            time=time,
            difficulty=difficulty.key,
            date=date or datetime.now(),
        )
        # Memory only changes once the file is written.
        self._save(scores)
        self._scores = scores
        logger.debug("New record on %s: %ds", difficulty.key, time)
        return True

    def get(self, difficulty: Difficulty) -> Optional[HighScore]:
        """Get the record for a difficulty, if any."""
        return self._scores.get(difficulty.key)

    def all(self) -> Dict[str, HighScore]:
        """All records keyed by difficulty key."""
        return dict(self._scores)

    def _save(self, scores: Dict[str, HighScore]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {key: score.to_dict() for key, score in scores.items()}
        with open(self.path, "w") as f:
            json.dump(data, f, indent=2)

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            with open(self.path) as f:
                data = json.load(f)
            self._scores = {
                key: HighScore.from_dict(value) for key, value in data.items()
            }
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Failed to load high scores from %s: %s", self.path, e)
            self._scores = {}
