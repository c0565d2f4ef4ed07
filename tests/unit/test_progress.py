from __future__ import annotations

from unittest.mock import Mock, patch

from tackle_import.services.progress import ProgressTracker, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch("sys.stdout.isatty", return_value=True):
        assert is_tty_enabled() is True
    with patch("sys.stdout.isatty", return_value=False):
        assert is_tty_enabled() is False


def test_tracker_disabled_without_tty(capsys):
    with patch("tackle_import.services.progress.is_tty_enabled", return_value=False):
        with ProgressTracker(3) as tracker:
            assert tracker.enabled is False
            assert tracker.pbar is None
            tracker.start("a.txt")
            tracker.write("preview text")
            tracker.finish(status="previewed")
            assert tracker.current == 1
    assert capsys.readouterr().out == "preview text\n"


def test_tracker_disabled_for_single_source():
    with patch("tackle_import.services.progress.is_tty_enabled", return_value=True), \
         patch("tackle_import.services.progress.tqdm") as mock_tqdm:
        tracker = ProgressTracker(1)
        assert tracker.enabled is False
        mock_tqdm.assert_not_called()


def test_tracker_with_tty_drives_tqdm():
    mock_pbar = Mock()
    with patch("tackle_import.services.progress.is_tty_enabled", return_value=True), \
         patch("tackle_import.services.progress.tqdm", return_value=mock_pbar) as mock_tqdm:
        tracker = ProgressTracker(2, description="Processing pastes")
        mock_tqdm.assert_called_once_with(
            total=2, desc="Processing pastes", unit="paste", leave=True, ncols=80, ascii=True
        )
        tracker.start("reels.txt")
        mock_pbar.set_description.assert_called_with("Processing pastes (reels.txt)")
        tracker.finish(status="committed", rows=3)
        mock_pbar.set_postfix.assert_called_once_with(status="committed", rows=3)
        mock_pbar.update.assert_called_once_with(1)
        tracker.write("table")
        mock_tqdm.write.assert_called_once_with("table")
        tracker.close()
        mock_pbar.close.assert_called_once()
        assert tracker.pbar is None
