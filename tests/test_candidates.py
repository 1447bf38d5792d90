from datetime import date

from result_api.drawlog.candidates import (
    ALL_EXTENSIONS,
    PRIORITY_SLOTS,
    date_first,
    days_back,
    exact_candidates,
    priority_first,
    without,
)

TODAY = date(2025, 8, 13)


def test_priority_first_checks_every_8pm_before_any_6pm():
    names = priority_first(TODAY, 2, ["8pm", "6pm", "1pm"], ["webp", "jpeg"])
    assert names[:4] == [
        "13-08-2025 8pm.webp",
        "13-08-2025 8pm.jpeg",
        "12-08-2025 8pm.webp",
        "12-08-2025 8pm.jpeg",
    ]
    assert names[4] == "13-08-2025 6pm.webp"
    assert len(names) == 2 * 3 * 2


def test_date_first_finishes_today_before_yesterday():
    names = date_first(TODAY, 2, ["8pm", "6pm", "1pm"], ["webp", "jpeg"])
    assert all(n.startswith("13-08-2025") for n in names[:6])
    assert names[6] == "12-08-2025 8pm.webp"
    assert sorted(names) == sorted(priority_first(TODAY, 2, ["8pm", "6pm", "1pm"], ["webp", "jpeg"]))


def test_window_is_inclusive_of_today_only():
    assert days_back(TODAY, 3) == [date(2025, 8, 13), date(2025, 8, 12), date(2025, 8, 11)]
    assert days_back(TODAY, 0) == []


def test_window_crosses_month_boundary():
    names = date_first(date(2025, 8, 1), 2, ["8pm"], ["webp"])
    assert names == ["01-08-2025 8pm.webp", "31-07-2025 8pm.webp"]


def test_generation_is_deterministic():
    assert priority_first(TODAY, 7) == priority_first(TODAY, 7)
    assert date_first(TODAY, 30) == date_first(TODAY, 30)
    assert priority_first(TODAY, 1)[0] == "13-08-2025 8pm.webp"


def test_default_slots_are_priority_ordered():
    assert list(PRIORITY_SLOTS) == ["8pm", "6pm", "1pm"]


def test_exact_candidates_cover_prefixes_and_extensions():
    names = exact_candidates(TODAY, "8pm")
    assert len(names) == 2 * len(ALL_EXTENSIONS)
    assert names[0] == "13-08-2025 8pm.webp"
    assert names[len(ALL_EXTENSIONS)] == "File 13-08-2025 8pm.webp"
    assert "File 13-08-2025 8pm.bmp" in names


def test_without_skips_seen_and_duplicates():
    assert without(["a", "b", "a", "c"], ["b"]) == ["a", "c"]
