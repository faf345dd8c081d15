"""One-shot cancellation token for a single automated move attempt"""

import threading
from typing import Callable, Optional


class Canceller:
    """
    Flag that flips once, running the attached cleanup the first time it does.

    A new Canceller is made for every attempt and thrown away afterwards, so it is never reset.
    """

    def __init__(self, body: Optional[Callable[[], None]] = None) -> None:
        self._body = body
        self._cancelled = False
        self._lock = threading.Lock()

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
        if self._body is not None:
            self._body()
