# tests/unit/test_criteria.py
from datetime import datetime, timedelta

import pytest

from logsift.domain import (
    ExclusionSet,
    InvalidSearchError,
    SearchCriteria,
    is_excluded,
    matches_date_window,
    matches_size_window,
    matches_target,
    require_target_name,
)


def test_exclusion_matches_anywhere_in_path_ignoring_case():
    ex = ExclusionSet.of(["Excluded-Temp"])
    assert ex.excludes("/vol/excluded-temp")
    assert ex.excludes("/vol/EXCLUDED-TEMP/deeper/logs")
    assert ex.excludes("/vol/my-excluded-temporary")  # substring, not segment
    assert not ex.excludes("/vol/A/logs")


def test_is_excluded_accepts_plain_iterables():
    assert is_excluded("/data/$Recycle.Bin/x", ["$recycle.bin"])
    assert not is_excluded("/data/x", [])


def test_blank_fragments_are_dropped():
    ex = ExclusionSet.of(["", "   ", "node_modules", "NODE_MODULES"])
    assert ex.fragments == ("node_modules",)
    assert not ex.excludes("/anything")


def test_exclusion_union_keeps_both_sides():
    ex = ExclusionSet.of(["a-frag"]).union(["B-Frag"])
    assert ex.fragments == ("a-frag", "b-frag")
    assert len(ex) == 2


def test_date_window_is_inclusive_on_both_ends():
    start = datetime(2025, 1, 1)
    end = datetime(2025, 1, 31)
    assert matches_date_window(start, start, end)
    assert matches_date_window(end, start, end)
    assert not matches_date_window(start - timedelta(seconds=1), start, end)
    assert not matches_date_window(end + timedelta(seconds=1), start, end)


def test_date_window_open_bounds():
    t = datetime(2000, 1, 1)
    assert matches_date_window(t)
    assert matches_date_window(t, start=None, end=t)
    assert not matches_date_window(t, start=t + timedelta(days=1))


def test_size_window_uses_integer_kilobytes():
    assert matches_size_window(1024, 1, 1)
    assert matches_size_window(2047, 1, 1)
    assert not matches_size_window(2048, 1, 1)
    assert not matches_size_window(1023, 1, 1)
    assert matches_size_window(0, 0, 0)


def test_matches_target_compares_final_segment_case_insensitively():
    assert matches_target("/vol/A/Logs", "logs")
    assert not matches_target("/vol/A/mylogs", "logs")
    assert not matches_target("/vol/logs/A", "logs")


@pytest.mark.parametrize("bad", [None, "", "   ", "a/b", "a\\b"])
def test_require_target_name_rejects_misuse(bad):
    with pytest.raises(InvalidSearchError):
        require_target_name(bad)


def test_search_criteria_normalises_fields():
    c = SearchCriteria("  logs ", exclusions=["Tmp"])
    assert c.target_name == "logs"
    assert isinstance(c.exclusions, ExclusionSet)
    assert c.exclusions.fragments == ("tmp",)

    with pytest.raises(InvalidSearchError):
        SearchCriteria("")
