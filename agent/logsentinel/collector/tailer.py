import asyncio
import os
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Optional

from ..parser.base import LogEvent, LogParser
from ..parser.line import LineParser
from ..utils.logging import get_logger

logger = get_logger("log_tailer")

DEFAULT_POLL_INTERVAL = 1.0
# Lines read back-to-back before handing control back to the event loop
YIELD_EVERY = 100


class TailSourceError(Exception):
    """The watched file can no longer be read; the stream is over."""


@dataclass
class TailCursor:
    handle: BinaryIO
    inode: int
    offset: int = 0
    buffer: bytes = b""

    def close(self):
        self.handle.close()


class LogTailer:
    """Tails a single file from its current end, surviving truncation and rotation."""

    def __init__(
        self,
        path: str,
        parser: Optional[LogParser] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.path = Path(path)
        self.parser = parser or LineParser()
        self.poll_interval = poll_interval
        # Set once the cursor sits at end-of-file and appends will be seen
        self.ready = asyncio.Event()

    async def stream(self, stop: Optional[asyncio.Event] = None) -> AsyncIterator[LogEvent]:
        stop = stop or asyncio.Event()
        if stop.is_set():
            return

        await asyncio.to_thread(self._ensure_exists)
        cursor = self._open(at_end=True)
        logger.info(f"Watching {self.path} from offset {cursor.offset}")
        self.ready.set()

        burst = 0
        try:
            while not stop.is_set():
                line = self._next_line(cursor)
                if line is not None:
                    event = self.parser.parse(line)
                    if event is not None:
                        yield event
                    burst += 1
                    if burst >= YIELD_EVERY:
                        burst = 0
                        await asyncio.sleep(0)
                    continue

                burst = 0

                rotated = self._check_rotation(cursor)
                if rotated is not None:
                    cursor = rotated
                    continue

                if stop.is_set():
                    break
                await self._wait(stop)
        finally:
            cursor.close()
            logger.info(f"Stopped watching {self.path}")

    def _ensure_exists(self):
        if self.path.exists():
            return
        logger.warning(f"{self.path} not found, creating an empty file")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch()
        except OSError as e:
            raise TailSourceError(f"Cannot create {self.path}: {e}") from e

    def _open(self, at_end: bool) -> TailCursor:
        try:
            handle = open(self.path, "rb")
        except OSError as e:
            raise TailSourceError(f"Cannot open {self.path}: {e}") from e

        try:
            inode = os.fstat(handle.fileno()).st_ino
            offset = handle.seek(0, os.SEEK_END) if at_end else 0
        except OSError as e:
            handle.close()
            raise TailSourceError(f"Cannot position in {self.path}: {e}") from e

        return TailCursor(handle=handle, inode=inode, offset=offset)

    def _next_line(self, cursor: TailCursor) -> Optional[str]:
        """Return the next complete line, or None if only a partial tail is available."""
        try:
            chunk = cursor.handle.readline()
        except OSError as e:
            raise TailSourceError(f"Read failed on {self.path}: {e}") from e

        if not chunk:
            return None

        cursor.offset += len(chunk)
        if not chunk.endswith(b"\n"):
            # Writer is mid-line; keep the fragment until the newline lands
            cursor.buffer += chunk
            return None

        raw = cursor.buffer + chunk
        cursor.buffer = b""
        return raw.decode("utf-8", errors="replace").rstrip("\r\n")

    def _check_rotation(self, cursor: TailCursor) -> Optional[TailCursor]:
        """Reopen at offset 0 if the file was truncated or replaced."""
        try:
            stat = os.stat(self.path)
        except FileNotFoundError:
            # Moved away, the replacement has not been created yet
            return None
        except OSError as e:
            raise TailSourceError(f"Cannot stat {self.path}: {e}") from e

        if stat.st_ino != cursor.inode:
            logger.info(f"File replaced: {self.path}, reading new file from start")
        elif stat.st_size < cursor.offset:
            logger.info(f"File truncated: {self.path}, reading from start")
        else:
            return None

        cursor.close()
        return self._open(at_end=False)

    async def _wait(self, stop: asyncio.Event):
        try:
            await asyncio.wait_for(stop.wait(), timeout=self.poll_interval)
        except asyncio.TimeoutError:
            pass
