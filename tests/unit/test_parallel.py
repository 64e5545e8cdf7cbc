"""
Unit tests for editor_finder.utils.parallel module.
"""

from editor_finder.utils.parallel import execute_parallel
from editor_finder.utils.stats import ExecutionStats


class TestExecuteParallel:
    """Test execute_parallel function."""

    def test_basic_execution(self):
        """Test basic parallel execution."""
        items = [1, 2, 3, 4, 5]

        def square(x: int) -> int:
            return x * x

        results = execute_parallel(items, square, max_workers=2, show_progress=False)

        assert len(results) == 5
        for item, result, error in results:
            assert error is None
            assert result == item * item

    def test_error_handling(self):
        """A failing item is reported and does not stop the others."""
        items = [1, 2, 3]
        errors_caught = []

        def fail_on_2(x: int) -> int:
            if x == 2:
                raise ValueError(f"Failed on {x}")
            return x * x

        def error_handler(item: int, error: Exception):
            errors_caught.append((item, error))

        results = execute_parallel(
            items,
            fail_on_2,
            max_workers=2,
            show_progress=False,
            error_handler=error_handler,
        )

        assert len(results) == 3
        assert len(errors_caught) == 1
        assert errors_caught[0][0] == 2
        for item, result, error in results:
            if item == 2:
                assert isinstance(error, ValueError)
                assert result is None
            else:
                assert error is None
                assert result == item * item

    def test_failures_counted_in_stats(self):
        stats = ExecutionStats(failed=0)

        def always_fail(x: int) -> int:
            raise RuntimeError("boom")

        execute_parallel([1, 2], always_fail, show_progress=False, stats=stats)
        assert stats["failed"] == 2

    def test_empty_items(self):
        """Test with empty item list."""
        assert execute_parallel([], lambda x: x, show_progress=False) == []

    def test_progress_bar_with_postfix(self):
        """Progress rendering calls the postfix callback once per item."""
        calls = []

        def postfix():
            calls.append(1)
            return {"done": len(calls)}

        results = execute_parallel(
            [1, 2, 3], lambda x: x, show_progress=True, progress_postfix=postfix
        )
        assert len(results) == 3
        assert len(calls) == 3
