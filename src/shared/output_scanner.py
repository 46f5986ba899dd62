import codecs
import re
from dataclasses import dataclass
from typing import Optional

from src.shared.logger import Logger

logger = Logger.get(__name__)

URL_PATTERN = re.compile(r"https?://localhost:\d+/\S*")
SERVER_VERSION_PATTERN = re.compile(r"Jupyter Server (?P<version>.*) is running at")


@dataclass
class ScanResult:
    """Outcome of feeding output into a StartupOutputScanner."""

    ready: bool = False
    url: Optional[str] = None
    version: Optional[str] = None


class StartupOutputScanner:
    """
    Incrementally scans the diagnostic output of a Jupyter server for the
    readiness signal.

    Output arrives in arbitrary chunks, so bytes are decoded incrementally and
    only complete lines are matched; the trailing partial line is kept until
    the next chunk (or flush()) completes it. The version line, when present,
    is remembered across chunks; the first serving URL marks readiness.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = ""
        self.version: Optional[str] = None
        self.url: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self.url is not None

    def feed(self, chunk: bytes | str) -> ScanResult:
        """
        Consume a chunk of output.

        Args:
            chunk: Raw bytes from the stream or already decoded text.

        Returns:
            A ScanResult; ready is True once a serving URL has been seen.
        """
        if self.ready:
            return self._result()

        text = chunk if isinstance(chunk, str) else self._decoder.decode(chunk)
        self._pending += text
        *lines, self._pending = self._pending.splitlines(keepends=True) or [""]
        # splitlines keeps a trailing newline on the last complete line only
        if self._pending.endswith(("\n", "\r")):
            lines.append(self._pending)
            self._pending = ""

        for line in lines:
            if self._scan_line(line):
                break
        return self._result()

    def flush(self) -> ScanResult:
        """Scan whatever partial line is still buffered (end of stream)."""
        if not self.ready:
            tail = self._pending + self._decoder.decode(b"", final=True)
            self._pending = ""
            if tail:
                self._scan_line(tail)
        return self._result()

    def _scan_line(self, line: str) -> bool:
        version_match = SERVER_VERSION_PATTERN.search(line)
        if version_match:
            self.version = version_match.group("version")

        url_match = URL_PATTERN.search(line)
        if url_match:
            self.url = url_match.group(0)
            return True

        logger.debug(f"Jupyter Server initialization message: {line.rstrip()}")
        return False

    def _result(self) -> ScanResult:
        return ScanResult(ready=self.ready, url=self.url, version=self.version)
