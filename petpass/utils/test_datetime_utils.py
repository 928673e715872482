# petpass/utils/test_datetime_utils.py
"""
통합 시간 관리 유틸리티 기능 테스트

사용법: python -m pytest petpass/utils/test_datetime_utils.py -v
"""

import pytest
from datetime import datetime, date, timezone, timedelta
from petpass.utils.datetime_utils import DateTimeUtils, now_iso, parse_iso


def test_parse_iso_datetime():
    """ISO 포맷 파싱 테스트"""
    test_cases = [
        "2024-01-15T10:30:00Z",
        "2024-01-15T10:30:00+09:00",
        "2024-01-15T10:30:00.123Z",
        "2024-01-15T10:30:00"
    ]

    for iso_string in test_cases:
        dt = DateTimeUtils.parse_iso_datetime(iso_string)
        assert isinstance(dt, datetime)
        assert dt.tzinfo == timezone.utc  # UTC로 정규화되어야 함

    assert DateTimeUtils.parse_iso_datetime("2024-01-15T10:30:00+09:00").hour == 1


def test_parse_iso_datetime_invalid():
    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("not-a-date")
    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("")


def test_parse_date_string():
    """날짜 문자열 파싱 테스트"""
    assert DateTimeUtils.parse_date_string("2020-01-01") == date(2020, 1, 1)
    with pytest.raises(ValueError):
        DateTimeUtils.parse_date_string("someday")


def test_to_iso_string_uses_milliseconds_and_z_suffix():
    dt = datetime(2024, 1, 15, 10, 30, 0, 123456, tzinfo=timezone.utc)
    assert DateTimeUtils.to_iso_string(dt) == "2024-01-15T10:30:00.123Z"

    naive = datetime(2024, 1, 15, 10, 30)
    assert DateTimeUtils.to_iso_string(naive) == "2024-01-15T10:30:00.000Z"


def test_now_iso_round_trip():
    iso = now_iso()
    assert iso.endswith("Z")
    assert abs(parse_iso(iso) - DateTimeUtils.now()) < timedelta(seconds=5)


def test_later_than_is_strictly_increasing():
    """같은 밀리초 안에 연속 호출해도 항상 이전 값보다 커야 함"""
    previous = DateTimeUtils.now_iso()
    for _ in range(50):
        current = DateTimeUtils.later_than(previous)
        assert parse_iso(current) > parse_iso(previous)
        previous = current


def test_later_than_with_future_previous_value():
    future = DateTimeUtils.to_iso_string(DateTimeUtils.now() + timedelta(hours=1))
    assert parse_iso(DateTimeUtils.later_than(future)) == parse_iso(future) + timedelta(milliseconds=1)


def test_later_than_without_previous_value():
    assert DateTimeUtils.later_than(None).endswith("Z")
    assert DateTimeUtils.later_than("garbage").endswith("Z")


def test_from_firestore():
    """Firestore Timestamp(datetime) 값은 ISO 문자열로 변환"""
    converted = DateTimeUtils.from_firestore({
        'createdAt': datetime(2024, 1, 1, tzinfo=timezone.utc),
        'nested': [{'at': datetime(2024, 1, 2, tzinfo=timezone.utc)}],
        'name': 'Fido'
    })
    assert converted['createdAt'] == "2024-01-01T00:00:00.000Z"
    assert converted['nested'][0]['at'] == "2024-01-02T00:00:00.000Z"
    assert converted['name'] == 'Fido'


def test_to_timestamp_ms():
    assert DateTimeUtils.to_timestamp_ms(datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)) == 1000
