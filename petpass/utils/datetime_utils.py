# petpass/utils/datetime_utils.py
"""
프로젝트 전체에서 일관된 시간/날짜 처리를 위한 중앙화된 유틸리티 모듈

이 모듈의 목적:
1. 모든 타임스탬프를 UTC ISO-8601 문자열(밀리초, 'Z' 접미사)로 통일
2. Firestore Timestamp 값과 ISO 문자열 사이의 변환
3. 수정 시각(updatedAt)이 항상 이전 값보다 커지도록 보장
"""

import logging
from datetime import datetime, date, timezone, timedelta
from typing import Any, Optional
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)


class DateTimeUtils:
    """시간/날짜 처리를 위한 중앙화된 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        """현재 시간을 UTC timezone-aware datetime으로 반환"""
        return datetime.now(timezone.utc)

    @staticmethod
    def now_iso() -> str:
        """현재 시간을 ISO 문자열로 반환"""
        return DateTimeUtils.to_iso_string(DateTimeUtils.now())

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 포맷 문자열을 UTC datetime 객체로 파싱

        지원 포맷:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00.123Z
        - 2024-01-15T10:30:00+09:00
        - 2024-01-15T10:30:00
        """
        try:
            if not iso_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")

            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)

            # timezone-naive인 경우 UTC로 가정
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)

            return dt.astimezone(timezone.utc)

        except Exception as e:
            logger.error(f"ISO datetime 파싱 실패: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}")

    @staticmethod
    def parse_date_string(date_string: str) -> date:
        """'YYYY-MM-DD' 등 날짜 문자열을 date 객체로 파싱"""
        try:
            if not date_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")
            return dateutil_parser.parse(date_string).date()
        except Exception as e:
            logger.error(f"날짜 문자열 파싱 실패: {date_string} - {e}")
            raise ValueError(f"잘못된 날짜 형식입니다: {date_string}")

    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """datetime 객체를 밀리초 단위 ISO 문자열('...Z')로 변환"""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        else:
            dt = dt.astimezone(timezone.utc)
        return dt.isoformat(timespec='milliseconds').replace('+00:00', 'Z')

    @staticmethod
    def later_than(previous_iso: Optional[str]) -> str:
        """
        현재 시각의 ISO 문자열을 반환하되, 이전 값보다 반드시 커지도록 보정합니다.
        같은 밀리초 안에 두 번 수정되는 경우 1ms를 더합니다.
        """
        current = DateTimeUtils.now()
        current = current.replace(microsecond=current.microsecond // 1000 * 1000)
        if previous_iso:
            try:
                previous = DateTimeUtils.parse_iso_datetime(previous_iso)
            except ValueError:
                logger.warning(f"이전 수정 시각을 해석할 수 없어 무시합니다: {previous_iso}")
            else:
                if current <= previous:
                    current = previous + timedelta(milliseconds=1)
        return DateTimeUtils.to_iso_string(current)

    @staticmethod
    def to_timestamp_ms(dt: Optional[datetime] = None) -> int:
        """datetime 객체(기본값: 현재 시각)를 Unix timestamp(밀리초)로 변환"""
        dt = dt or DateTimeUtils.now()
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return int(dt.timestamp() * 1000)

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Firestore에서 읽은 데이터의 Timestamp 값을 ISO 문자열로 변환

        변환 규칙:
        - Firestore timestamp / datetime -> ISO 문자열 (UTC)
        - dict/list 내부 재귀적 변환
        - 그 외 타입은 그대로 반환
        """
        if isinstance(obj, datetime):
            return DateTimeUtils.to_iso_string(obj)
        elif isinstance(obj, dict):
            return {k: DateTimeUtils.from_firestore(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [DateTimeUtils.from_firestore(item) for item in obj]
        return obj


# 편의를 위한 글로벌 함수들
def now_iso() -> str:
    """현재 UTC 시간의 ISO 문자열 반환"""
    return DateTimeUtils.now_iso()

def parse_iso(iso_string: str) -> datetime:
    """ISO 문자열을 datetime으로 파싱"""
    return DateTimeUtils.parse_iso_datetime(iso_string)

def to_iso(dt: datetime) -> str:
    """datetime을 ISO 문자열로 변환"""
    return DateTimeUtils.to_iso_string(dt)
