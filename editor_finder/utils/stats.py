"""
Thread-safe counters for parallel runs.
"""

from threading import Lock


class ExecutionStats:
    """
    Named counters that many worker threads can bump safely.

    Example:
        stats = ExecutionStats(processed=0, added=0)
        stats.increment("added")
    """

    def __init__(self, **initial_values: int):
        self._lock = Lock()
        self._counters: dict[str, int] = dict(initial_values)

    def increment(self, key: str, amount: int = 1) -> None:
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + amount

    def get(self, key: str, default: int = 0) -> int:
        with self._lock:
            return self._counters.get(key, default)

    def to_dict(self) -> dict[str, int]:
        with self._lock:
            return self._counters.copy()

    def __getitem__(self, key: str) -> int:
        return self.get(key)

    def __repr__(self) -> str:
        with self._lock:
            items = ", ".join(f"{k}={v}" for k, v in sorted(self._counters.items()))
        return f"ExecutionStats({items})"
