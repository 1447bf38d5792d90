from datetime import date

from conftest import write_images
from result_api.index_store import ResultIndex, scan_directory


def test_scan_skips_non_results(images_dir):
    write_images(images_dir, ["12-08-2025 8pm.webp", "logo.png", "13-08-2025 1pm.jpeg"])
    (images_dir / "13-08-2025 6pm.txt").write_text("not an image")
    (images_dir / "sub").mkdir()
    names = [r.filename for r in scan_directory(images_dir)]
    assert names == ["13-08-2025 1pm.jpeg", "12-08-2025 8pm.webp"]


def test_scan_missing_directory_is_empty(tmp_path):
    assert scan_directory(tmp_path / "nope") == []


def test_scan_fills_file_metadata(images_dir):
    write_images(images_dir, ["12-08-2025 8pm.webp"])
    (r,) = scan_directory(images_dir)
    assert r.file_size == (images_dir / "12-08-2025 8pm.webp").stat().st_size
    assert r.last_modified is not None
    assert r.timestamp == int(r.date_time.timestamp())


def test_find_prefers_plain_name_and_preferred_format(images_dir):
    write_images(images_dir, ["File 12-08-2025 8pm.webp", "12-08-2025 8pm.png", "12-08-2025 8pm.webp"])
    index = ResultIndex(images_dir)
    assert index.find(date(2025, 8, 12), "8pm").filename == "12-08-2025 8pm.webp"
    assert index.find(date(2025, 8, 12), "6pm") is None


def test_listing_is_memoized_until_cleared(images_dir):
    write_images(images_dir, ["12-08-2025 8pm.webp"])
    index = ResultIndex(images_dir, ttl_seconds=3600)
    assert len(index.list()) == 1
    write_images(images_dir, ["13-08-2025 8pm.webp"])
    assert len(index.list()) == 1
    index.clear()
    assert [r.filename for r in index.list()] == ["13-08-2025 8pm.webp", "12-08-2025 8pm.webp"]
