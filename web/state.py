"""Analyzer pool and application state for the web application."""

import threading
from typing import Callable, List, Optional

from kaiseki import Analyzer, ClonedResult


class AnalyzerPool:
    """
    Hand out one Analyzer per worker thread.

    MeCab instances must not be shared between threads, so each thread that
    serves requests gets its own analyzer, created on first use. Only
    cloned results leave the pool.
    """

    def __init__(self, factory: Optional[Callable[[], Analyzer]] = None):
        """
        Initialize the pool.

        Args:
            factory: Callable creating a new Analyzer (default: ``Analyzer()``).
        """
        self.factory = factory or Analyzer
        self._local = threading.local()
        self._lock = threading.Lock()
        self._analyzers: List[Analyzer] = []

    def get(self) -> Analyzer:
        """Return the calling thread's analyzer, creating it if needed."""
        analyzer = getattr(self._local, "analyzer", None)
        if analyzer is None or analyzer.released:
            analyzer = self.factory()
            self._local.analyzer = analyzer
            with self._lock:
                self._analyzers.append(analyzer)
        return analyzer

    def analyze(self, text: str) -> ClonedResult:
        """Parse text with this thread's analyzer and return an owned copy."""
        return self.get().parse(text).clone()

    def release_all(self):
        """Release every analyzer created by the pool."""
        with self._lock:
            for analyzer in self._analyzers:
                analyzer.release()
            self._analyzers.clear()
        self._local = threading.local()


class AppState:
    """Global application state."""

    def __init__(self, max_text_length: int = 10000):
        """
        Initialize application state.

        Args:
            max_text_length: Longest text (in characters) accepted per request.
        """
        self.pool = AnalyzerPool()
        self.max_text_length = max_text_length


# Global instance
app_state = AppState()
