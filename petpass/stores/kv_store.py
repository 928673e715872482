# petpass/stores/kv_store.py
import os
import json
import logging
import tempfile
import threading
from typing import Any, Dict, Optional

from petpass.core.exceptions import QuotaExceededError, StorageFailureError


class LocalKeyValueStore:
    """
    기기(프로세스) 로컬 key/value 저장소.
    브라우저 localStorage와 같은 방식으로 문자열 값을 키별로 보관하며,
    전체 크기가 quota_bytes를 넘는 쓰기는 QuotaExceededError로 거부하고 기존 데이터를 유지합니다.

    path가 None이면 파일 없이 메모리에만 보관합니다.
    """

    def __init__(self, path: Optional[str] = None, quota_bytes: int = 5 * 1024 * 1024):
        self.path = path
        self.quota_bytes = quota_bytes
        self._lock = threading.RLock()
        self._items: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path or not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logging.error(f"로컬 저장소 파일을 읽을 수 없습니다 ({self.path}): {e}", exc_info=True)
            raise StorageFailureError("로컬 저장소를 읽는 중 오류가 발생했습니다.")
        if not isinstance(data, dict):
            raise StorageFailureError("로컬 저장소 파일 형식이 올바르지 않습니다.")
        return data

    @staticmethod
    def _size_of(items: Dict[str, str]) -> int:
        # localStorage와 마찬가지로 키와 값의 글자 수 합으로 용량을 계산
        return sum(len(key) + len(value) for key, value in items.items())

    def _persist(self, items: Dict[str, str]) -> None:
        if self._size_of(items) > self.quota_bytes:
            raise QuotaExceededError()
        if self.path:
            directory = os.path.dirname(os.path.abspath(self.path))
            try:
                os.makedirs(directory, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(dir=directory, suffix='.tmp')
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(items, f, ensure_ascii=False)
                os.replace(tmp_path, self.path)
            except OSError as e:
                logging.error(f"로컬 저장소 쓰기 실패 ({self.path}): {e}", exc_info=True)
                raise StorageFailureError()
        self._items = items

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            items = dict(self._items)
            items[key] = value
            self._persist(items)

    def remove_item(self, key: str) -> None:
        with self._lock:
            if key not in self._items:
                return
            items = dict(self._items)
            del items[key]
            self._persist(items)

    def get_json(self, key: str, default: Any = None) -> Any:
        raw = self.get_item(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError as e:
            logging.error(f"로컬 저장소 값 파싱 실패 (key: {key}): {e}")
            raise StorageFailureError("저장된 데이터 형식이 올바르지 않습니다.")

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value, ensure_ascii=False))

    @property
    def lock(self) -> threading.RLock:
        """여러 키를 읽고 쓰는 작업을 하나로 묶을 때 사용하는 잠금."""
        return self._lock
