"""gofmt adapter

Pipes generated source through gofmt when it is installed. A missing gofmt
is not an error: the generator already writes gofmt layout.
"""

import shutil
import subprocess
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class GoFormatter:
    """Format Go source with gofmt"""

    def __init__(self, gofmt_path: Optional[str] = None, timeout_seconds: int = 30):
        """
        Args:
            gofmt_path: Explicit gofmt executable; looked up on PATH if None
            timeout_seconds: Time allowed for one gofmt run
        """
        self.gofmt_path = gofmt_path or shutil.which("gofmt")
        self.timeout_seconds = timeout_seconds

    @property
    def available(self) -> bool:
        return self.gofmt_path is not None

    def format(self, source: str) -> str:
        """
        Return formatted source.

        On a gofmt failure the unformatted source is returned, so the caller
        can write it out and the Go compiler reports the real problem.
        """
        if not self.available:
            logger.debug("gofmt not found, leaving source unformatted")
            return source

        try:
            result = subprocess.run(
                [self.gofmt_path],
                input=source.encode('utf-8'),
                capture_output=True,
                timeout=self.timeout_seconds
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"gofmt timed out after {self.timeout_seconds}s; output left unformatted")
            return source
        except OSError as e:
            logger.warning(f"could not run gofmt: {e}; output left unformatted")
            return source

        if result.returncode != 0:
            stderr = result.stderr.decode('utf-8', errors='ignore') if result.stderr else ''
            logger.warning(f"internal error: invalid Go generated: {stderr.strip()}")
            logger.warning("compile the package to analyze the error")
            return source

        return result.stdout.decode('utf-8')
