"""
Tests for the session counters kept by the progress display.
"""

import io

from rich.console import Console

from soundcloud_cli.cli.progress_manager import ProgressManager


def _manager() -> ProgressManager:
    return ProgressManager(Console(file=io.StringIO()), quiet=True)


class TestCounters:
    def test_finished_and_failed_tasks(self):
        manager = _manager()
        manager.add_to_total(2)

        manager.remove_task(manager.add_track_task("a"), success=True)
        manager.remove_task(manager.add_track_task("b"), success=False)

        stats = manager.get_statistics()
        assert stats["completed"] == 1
        assert stats["failed"] == 1
        assert stats["active_downloads"] == 0
        assert stats["peak_concurrent"] == 1

    def test_cancelled_task_is_not_a_failure(self):
        manager = _manager()
        task_id = manager.add_track_task("Night Drive")

        manager.cancel_task(task_id)

        stats = manager.get_statistics()
        assert stats["cancelled"] == 1
        assert stats["failed"] == 0
        assert stats["completed"] == 0
        assert stats["active_downloads"] == 0

    def test_cancelling_a_removed_task_is_ignored(self):
        manager = _manager()
        task_id = manager.add_track_task("Night Drive")
        manager.remove_task(task_id)

        manager.cancel_task(task_id)

        stats = manager.get_statistics()
        assert stats["cancelled"] == 0
        assert stats["completed"] == 1

    def test_progress_sink_scales_fractions(self):
        manager = _manager()
        task_id = manager.add_track_task("Night Drive")

        manager.progress_sink(task_id)(0.25)

        assert manager.progress.tasks[0].completed == 25
