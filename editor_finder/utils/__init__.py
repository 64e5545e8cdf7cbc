"""Shared utilities: rate limiting, parallel execution, counters, tqdm-aware logging."""
