# petpass/utils/text_utils.py
from typing import Iterable, List, Optional, Union


def normalize_comma_list(value: Optional[Union[str, Iterable[str]]]) -> List[str]:
    """
    콤마로 구분된 사용자 입력을 정규화된 리스트로 변환합니다.
    - ','로 분리 후 각 항목의 앞뒤 공백 제거
    - 빈 항목 제거, 중복 항목 제거(처음 나온 항목 유지), 순서 유지
    이미 리스트로 들어온 값도 각 항목을 다시 분리하여 같은 규칙을 적용합니다.
    """
    if value is None:
        return []
    if isinstance(value, str):
        segments = value.split(',')
    else:
        segments = [segment for item in value if item is not None for segment in str(item).split(',')]

    result: List[str] = []
    for segment in segments:
        cleaned = segment.strip()
        if cleaned and cleaned not in result:
            result.append(cleaned)
    return result


def truncate_text(text: Optional[str], limit: int, suffix: str = '...') -> str:
    """limit 글자를 넘는 문자열은 앞에서 limit 글자만 남기고 suffix를 붙입니다."""
    if not text:
        return ''
    if len(text) <= limit:
        return text
    return text[:limit] + suffix
