import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from src.backend.errors import ScanError
from src.backend.fs.scanner import find_marker_files, scan_media_files
from src.shared.intent_kind import IntentKind


def _touch(path: Path, mtime: float, content: bytes = b"x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    os.utime(path, (mtime, mtime))
    return path


class TestScanMediaFiles(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name).resolve()

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_filters_by_suffix_and_sorts_oldest_first(self) -> None:
        newer = _touch(self.root / "movie2.mp4", 2_000_000)
        older = _touch(self.root / "sub" / "movie1.mkv", 1_000_000)
        _touch(self.root / "notes.txt", 500_000)
        _touch(self.root / "movie3.mp4.delete", 500_000)

        files = scan_media_files([self.root], [".mp4", ".mkv"])

        self.assertEqual([f.path for f in files], [older, newer])
        self.assertLess(files[0].modified_at, files[1].modified_at)

    def test_ties_broken_by_path(self) -> None:
        b = _touch(self.root / "b.mp4", 1_000_000)
        a = _touch(self.root / "a.mp4", 1_000_000)
        files = scan_media_files([self.root], [".mp4"])
        self.assertEqual([f.path for f in files], [a, b])

    def test_concatenates_roots(self) -> None:
        other = Path(tempfile.mkdtemp()).resolve()
        try:
            x = _touch(other / "x.mp4", 3_000_000)
            y = _touch(self.root / "y.mp4", 1_000_000)
            files = scan_media_files([other, self.root], [".mp4"])
            self.assertEqual([f.path for f in files], [y, x])
        finally:
            shutil.rmtree(other, ignore_errors=True)

    def test_missing_root_raises_scan_error(self) -> None:
        with self.assertRaises(ScanError):
            scan_media_files([self.root / "missing"], [".mp4"])

    def test_vanished_subdirectory_is_skipped(self) -> None:
        keep = _touch(self.root / "keep.mp4", 1_000_000)
        _touch(self.root / "gone" / "lost.mp4", 1_000_000)

        real_scandir = os.scandir
        gone = str(self.root / "gone")

        def flaky_scandir(path=".", *args, **kwargs):
            if os.fspath(path) == gone:
                raise FileNotFoundError(2, "No such file or directory", gone)
            return real_scandir(path, *args, **kwargs)

        with patch("os.scandir", side_effect=flaky_scandir):
            with self.assertLogs("src.backend.fs.scanner", level="WARNING"):
                files = scan_media_files([self.root], [".mp4"])

        self.assertEqual([f.path for f in files], [keep])


class TestFindMarkerFiles(unittest.TestCase):
    def test_finds_delete_and_archive_markers(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            d = _touch(root / "a.mp4.delete", 1)
            a = _touch(root / "sub" / "b.mkv.archive", 1)
            _touch(root / "c.mp4", 1)

            markers = find_marker_files([root])

            self.assertEqual(sorted(markers), sorted([(d, IntentKind.DELETE), (a, IntentKind.ARCHIVE)]))


if __name__ == "__main__":
    unittest.main()
