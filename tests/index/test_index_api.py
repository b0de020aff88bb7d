import os
import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from src.backend.app import create_app
from src.backend.fs.identifiers import compute_path_digest
from src.backend.settings.models import MediaFilerSettings


def _touch(path: Path, mtime: float, content: bytes) -> Path:
    path.write_bytes(content)
    os.utime(path, (mtime, mtime))
    return path


class TestIndexApi(unittest.TestCase):
    """HTTP surface; the client is used without its context so the sweeper task never starts."""

    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        base = Path(self.tmp.name).resolve()
        self.root = base / "media"
        self.root.mkdir()
        self.archive = base / "archive"
        self.archive.mkdir()

        self.movie1 = _touch(self.root / "movie1.mp4", 1_000_000, b"first movie")
        self.movie2 = _touch(self.root / "movie2.mkv", 2_000_000, b"second movie")

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def _client(self, *, archive: bool = False) -> TestClient:
        settings = MediaFilerSettings.build(
            roots=[self.root],
            archive_dir=self.archive if archive else None,
        )
        return TestClient(create_app(settings))

    def _ids(self, client: TestClient) -> dict[str, str]:
        resp = client.get("/api/files")
        self.assertEqual(resp.status_code, 200)
        return {Path(f["path"]).name: f["id"] for f in resp.json()["files"]}

    def test_listing_page_renders_titles(self) -> None:
        client = self._client()
        resp = client.get("/")
        self.assertEqual(resp.status_code, 200)
        self.assertIn("movie1", resp.text)
        self.assertIn("movie2", resp.text)
        self.assertNotIn("'archive'", resp.text)

    def test_json_listing_is_ordered(self) -> None:
        client = self._client()
        body = client.get("/api/files").json()
        self.assertFalse(body["archive_enabled"])
        self.assertEqual([f["title"] for f in body["files"]], ["movie1", "movie2"])

    def test_serve_file_by_id(self) -> None:
        client = self._client()
        ids = self._ids(client)
        resp = client.get(f"/f/{ids['movie2.mkv']}")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.content, b"second movie")

    def test_serve_file_malformed_and_unknown(self) -> None:
        client = self._client()
        self._ids(client)
        self.assertEqual(client.get("/f/NOT-AN-ID").status_code, 400)
        self.assertEqual(client.get("/f/zzzzzzzzzzzz").status_code, 404)

    def test_delete_and_undo(self) -> None:
        client = self._client()
        file_id = self._ids(client)["movie1.mp4"]

        resp = client.post(f"/delete/{file_id}")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["kind"], "delete")
        self.assertFalse(body["undo"])
        self.assertTrue((self.root / "movie1.mp4.delete").exists())

        pending = client.get("/api/pending").json()["intents"]
        self.assertEqual([p["original_path"] for p in pending], [str(self.movie1)])

        resp = client.post(f"/delete/{file_id}?undo")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["undo"])
        self.assertTrue(self.movie1.exists())
        self.assertEqual(client.get("/api/pending").json()["intents"], [])

    def test_delete_unknown_id(self) -> None:
        client = self._client()
        self._ids(client)
        resp = client.post("/delete/zzzzzzzzzzzz")
        self.assertEqual(resp.status_code, 400)

    def test_delete_twice_is_client_error(self) -> None:
        client = self._client()
        file_id = self._ids(client)["movie1.mp4"]
        self.assertEqual(client.post(f"/delete/{file_id}").status_code, 200)
        self.assertEqual(client.post(f"/delete/{file_id}").status_code, 400)

    def test_archive_disabled(self) -> None:
        client = self._client(archive=False)
        file_id = self._ids(client)["movie1.mp4"]

        resp = client.post(f"/archive/{file_id}")

        self.assertEqual(resp.status_code, 400)
        self.assertTrue(self.movie1.exists())
        self.assertFalse((self.root / "movie1.mp4.archive").exists())

    def test_archive_enabled(self) -> None:
        client = self._client(archive=True)
        self.assertIn("archive", client.get("/").text)
        file_id = self._ids(client)["movie2.mkv"]

        resp = client.get(f"/archive/{file_id}")

        self.assertEqual(resp.status_code, 200)
        self.assertTrue((self.root / "movie2.mkv.archive").exists())

    def test_startup_recovers_leftover_markers(self) -> None:
        self.movie1.rename(self.root / "movie1.mp4.delete")
        client = self._client()
        pending = client.get("/api/pending").json()["intents"]
        self.assertEqual([p["kind"] for p in pending], ["delete"])

    def test_pending_list_offers_undo(self) -> None:
        self.movie1.rename(self.root / "movie1.mp4.delete")
        client = self._client()
        undo_id = compute_path_digest(self.movie1)

        page = client.get("/").text
        self.assertIn(f'data-id="{undo_id}"', page)
        self.assertIn("undoPending(event, 'delete')", page)
        self.assertEqual(client.get("/api/pending").json()["intents"][0]["undo_id"], undo_id)

        resp = client.post(f"/delete/{undo_id}?undo")

        self.assertEqual(resp.status_code, 200)
        self.assertTrue(self.movie1.exists())
        self.assertNotIn("undoPending", client.get("/").text)


if __name__ == "__main__":
    unittest.main()
