"""
Caller-side clock for the board's elapsed-time counter.

The board owns no timers; a Ticker calls Board.tick() from a daemon
thread once per interval while it runs.
"""
import threading
from typing import Callable, Optional

from .board import Board


class Ticker:
    """
    Periodic driver of Board.tick().

    Use start()/stop() directly, or follow() to run exactly while the
    board is PLAYING.
    """

    def __init__(self, board: Board, interval: float = 1.0) -> None:
        """
        Initialize the ticker.

        Args:
            board: Board whose clock is driven.
            interval: Seconds between ticks.
        """
        self.board = board
        self.interval = interval
        self._guard = threading.Lock()
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        with self._guard:
            return self._is_running()

    def _is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._stop_event is not None
            and not self._stop_event.is_set()
        )

    def start(self) -> None:
        """Start ticking; no-op if already running."""
        with self._guard:
            if self._is_running():
                return
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name="sweeper-ticker",
                daemon=True,
            )
            self._thread.start()

    def stop(self) -> None:
        """
        Stop ticking.

        Does not join the thread: stop() is called from board listeners
        while the board lock is held, and the thread may be waiting on it.
        """
        with self._guard:
            if self._stop_event is not None:
                self._stop_event.set()

    def follow(self) -> Callable[[], None]:
        """
        Run while the board is PLAYING and stop when it leaves that state.

        Returns:
            Function that detaches the ticker from the board.
        """
        def on_change(board: Board) -> None:
            if board.is_playing:
                self.start()
            else:
                self.stop()

        detach = self.board.subscribe(on_change)
        on_change(self.board)
        return detach

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            with self.board.lock:
                # stop() may have run while this thread waited for the lock.
                if stop_event.is_set():
                    break
                self.board.tick()
