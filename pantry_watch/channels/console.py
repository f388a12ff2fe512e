"""Local alerts printed to the terminal."""

from __future__ import annotations

import sys
from typing import TextIO


class ConsoleAlertSender:
    """Writes alerts to a stream (stdout by default)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    async def send(self, title: str, body: str) -> None:
        stream = self._stream or sys.stdout
        print(f"🔔 {title}: {body}", file=stream)
        stream.flush()
