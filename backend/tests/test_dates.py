import datetime

import pytest

from utils.dates import label_for_date_key, start_of_week, to_date_key, weekday_index


def test_to_date_key_normalizes_inputs():
    assert to_date_key("2030-03-05") == "2030-03-05"
    assert to_date_key(" 2030-03-05 ") == "2030-03-05"
    assert to_date_key("2030-03-05T04:00:00Z") == "2030-03-05"
    assert to_date_key(datetime.date(2030, 3, 5)) == "2030-03-05"
    assert to_date_key(datetime.datetime(2030, 3, 5, 12, 30)) == "2030-03-05"
    assert to_date_key(None) is None
    assert to_date_key("") is None


def test_to_date_key_converts_offsets_to_utc():
    assert to_date_key("2030-03-05T22:00:00-05:00") == "2030-03-06"


def test_to_date_key_rejects_garbage():
    with pytest.raises(ValueError):
        to_date_key("someday")
    with pytest.raises(ValueError):
        to_date_key("2030-02-30")


def test_week_helpers():
    assert start_of_week("2030-03-07") == datetime.date(2030, 3, 4)
    assert start_of_week("2030-03-04") == datetime.date(2030, 3, 4)
    assert weekday_index("2030-03-03") == 0
    assert weekday_index("2030-03-05") == 2


def test_label_for_date_key():
    assert label_for_date_key("2030-03-05") == "Tuesday, Mar 5"
    assert label_for_date_key("unscheduled") == ""
    assert label_for_date_key(None) == ""
