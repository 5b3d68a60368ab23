"""
Text rendering and counter formatting for presentation layers.
"""
from typing import Union

from .board import Board, BoardSnapshot


_SYMBOLS = {-1: ".", -2: "F", 9: "*", 0: " "}


def render_text(board: Union[Board, BoardSnapshot]) -> str:
    """
    Render a board as ASCII text, one line per row.

    Symbols:
        . hidden, F flagged, * revealed mine, blank for an empty cell,
        1-8 for numbered cells.
    """
    obs = board.get_observation()
    lines = []
    for row in obs:
        row_str = ""
        for val in row:
            row_str += _SYMBOLS.get(int(val), str(val))
            row_str += " "
        lines.append(row_str)
    return "\n".join(lines)


def format_time(seconds: int) -> str:
    """Format seconds as MM:SS."""
    minutes, seconds = divmod(seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def format_mine_count(remaining: int) -> str:
    """Zero-padded mine counter; over-flagging shows 000."""
    return f"{max(0, remaining):03d}"
