#!/usr/bin/env python3
"""
Minesweeper - terminal front end.

Usage:
    python main.py play [--difficulty {beginner,intermediate,expert}]
                        [--width W --height H --mines M] [--seed N]
    python main.py scores
"""
import argparse
import logging
import random
from pathlib import Path
from typing import Optional

from src.sweeper import (
    Board,
    Difficulty,
    HighScoreManager,
    InvalidConfiguration,
    PRESETS,
    Ticker,
    format_mine_count,
    format_time,
    render_text,
)


DEFAULT_SCORES_FILE = Path.home() / ".sweeper" / "highscores.json"

HELP_TEXT = (
    "Commands: r ROW COL (reveal), f ROW COL (flag/unflag), "
    "c ROW COL (chord), n (new game), q (quit)"
)


def build_difficulty(args: argparse.Namespace) -> Difficulty:
    """Build the difficulty from CLI arguments."""
    custom = (args.width, args.height, args.mines)
    if any(value is not None for value in custom):
        if any(value is None for value in custom):
            raise InvalidConfiguration(
                "--width, --height and --mines must be given together"
            )
        return Difficulty(args.width, args.height, args.mines)
    return Difficulty.preset(args.difficulty)


def print_board(board: Board) -> None:
    """Print the board and its counters."""
    snapshot = board.snapshot()
    header = "   " + "".join(f"{col % 10} " for col in range(board.width))
    print(header)
    for row, line in enumerate(render_text(snapshot).splitlines()):
        print(f"{row:>2} {line}")
    print(
        f"Mines: {format_mine_count(snapshot.remaining_mines)} | "
        f"Time: {format_time(snapshot.elapsed_time)} | "
        f"State: {snapshot.game_state.name}"
    )


def handle_command(board: Board, command: str) -> Optional[bool]:
    """
    Apply one line of player input.

    Returns:
        None to quit, otherwise whether the board accepted the action.
    """
    parts = command.split()
    if not parts:
        return False
    action = parts[0].lower()

    if action == "q":
        return None
    if action == "n":
        board.reset()
        return True

    actions = {"r": board.reveal, "f": board.toggle_flag, "c": board.chord}
    if action not in actions or len(parts) != 3:
        print(HELP_TEXT)
        return False
    try:
        row, col = int(parts[1]), int(parts[2])
    except ValueError:
        print(HELP_TEXT)
        return False
    return actions[action](row, col)


def play(args: argparse.Namespace) -> None:
    """Play interactively in the terminal."""
    try:
        difficulty = build_difficulty(args)
    except InvalidConfiguration as e:
        print(f"Invalid board: {e}")
        return

    scores = HighScoreManager(args.scores_file)
    board = Board(difficulty, rng=random.Random(args.seed))
    ticker = Ticker(board)
    ticker.follow()

    print(f"{difficulty.name} {difficulty.width}x{difficulty.height}, "
          f"{difficulty.num_mines} mines")
    print(HELP_TEXT)

    try:
        while True:
            print_board(board)
            try:
                command = input("> ")
            except EOFError:
                break

            was_won = board.is_won
            result = handle_command(board, command)
            if result is None:
                break

            if board.is_won and not was_won:
                print_board(board)
                print(f"\n*** WIN in {format_time(board.elapsed_time)}! ***")
                try:
                    if scores.check_and_save(board.elapsed_time, difficulty):
                        print("New best time!")
                except OSError as e:
                    print(f"Could not save high score: {e}")
                print("Type n for a new game or q to quit.")
            elif board.is_lost and result:
                print_board(board)
                print("\n*** LOST (hit mine) ***")
                print("Type n for a new game or q to quit.")
    finally:
        ticker.stop()


def show_scores(args: argparse.Namespace) -> None:
    """Print stored best times."""
    scores = HighScoreManager(args.scores_file).all()
    if not scores:
        print("No high scores yet.")
        return

    names = {preset.key: preset.name for preset in PRESETS.values()}
    print(f"{'Difficulty':<20} {'Best':<8} {'Date':<20}")
    print("-" * 48)
    for key, score in sorted(scores.items()):
        label = names.get(key, key)
        print(
            f"{label:<20} {score.formatted_time:<8} "
            f"{score.date:%Y-%m-%d %H:%M}"
        )


def main() -> None:
    """Parse arguments and run the appropriate command."""
    parser = argparse.ArgumentParser(
        description="Minesweeper - play in the terminal"
    )
    parser.add_argument(
        "--scores-file",
        type=Path,
        default=DEFAULT_SCORES_FILE,
        help="JSON file holding best times",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a game")
    play_parser.add_argument(
        "--difficulty",
        choices=sorted(PRESETS),
        default="beginner",
        help="Preset board size",
    )
    play_parser.add_argument("--width", type=int, help="Custom board width")
    play_parser.add_argument("--height", type=int, help="Custom board height")
    play_parser.add_argument("--mines", type=int, help="Custom mine count")
    play_parser.add_argument(
        "--seed", type=int, default=None, help="Random seed for mine placement"
    )

    # Scores command
    subparsers.add_parser("scores", help="Show best times")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command == "play":
        play(args)
    elif args.command == "scores":
        show_scores(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
