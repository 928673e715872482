# petpass/stores/token_blocklist.py
"""
로그아웃으로 무효화된 액세스 토큰(jti) 목록.
토큰 만료 시각과 함께 저장하며, 만료된 항목은 더 이상 막을 필요가 없으므로 정리합니다.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional
from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from petpass.core.exceptions import StorageFailureError
from petpass.stores.kv_store import LocalKeyValueStore
from petpass.utils.datetime_utils import DateTimeUtils

REVOKED_TOKENS_KEY = 'revoked_tokens'


class TokenBlocklist(ABC):

    @abstractmethod
    def add(self, jti: str, expires_at: datetime) -> None:
        """jti를 만료 시각(expires_at)까지 무효화합니다."""

    @abstractmethod
    def contains(self, jti: str) -> bool:
        """아직 만료되지 않은 무효화 항목인지 확인합니다."""


class LocalTokenBlocklist(TokenBlocklist):
    """로컬 key/value 저장소의 'revoked_tokens' 키에 {jti: 만료 epoch초}로 보관합니다."""

    def __init__(self, kv_store: LocalKeyValueStore):
        self.kv = kv_store

    def _active(self, now: Optional[datetime] = None) -> Dict[str, float]:
        now_ts = (now or DateTimeUtils.now()).timestamp()
        entries = self.kv.get_json(REVOKED_TOKENS_KEY, {})
        return {jti: exp for jti, exp in entries.items() if exp > now_ts}

    def add(self, jti: str, expires_at: datetime) -> None:
        with self.kv.lock:
            entries = self._active()
            if expires_at.timestamp() > DateTimeUtils.now().timestamp():
                entries[jti] = expires_at.timestamp()
            self.kv.set_json(REVOKED_TOKENS_KEY, entries)

    def contains(self, jti: str) -> bool:
        return jti in self._active()


class FirestoreTokenBlocklist(TokenBlocklist):
    """
    Firestore 'revoked_tokens' 컬렉션. 문서 ID는 jti, 필드는 revoked_at / expires_at.
    새 항목을 추가할 때 만료된 문서를 함께 삭제합니다.
    """

    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.revoked_tokens_ref = self.db.collection(REVOKED_TOKENS_KEY)

    def _purge_expired(self, now: datetime) -> None:
        expired = self.revoked_tokens_ref.where(filter=FieldFilter("expires_at", "<=", now)).stream()
        for doc in expired:
            doc.reference.delete()

    def add(self, jti: str, expires_at: datetime) -> None:
        now = DateTimeUtils.now()
        try:
            self._purge_expired(now)
            self.revoked_tokens_ref.document(jti).set({
                'revoked_at': now,
                'expires_at': expires_at
            })
        except Exception as e:
            logging.error(f"Blocklist 토큰 추가 실패 (jti: {jti}): {e}", exc_info=True)
            raise StorageFailureError()

    def contains(self, jti: str) -> bool:
        try:
            doc = self.revoked_tokens_ref.document(jti).get()
        except Exception as e:
            logging.error(f"Blocklist 조회 실패 (jti: {jti}): {e}", exc_info=True)
            raise StorageFailureError()
        if not doc.exists:
            return False
        expires_at = doc.to_dict().get('expires_at')
        return expires_at is None or expires_at > DateTimeUtils.now()


def expiry_from_claim(exp: Optional[int]) -> datetime:
    """JWT 'exp' 클레임(epoch 초)을 UTC datetime으로 변환합니다. 만료 없는 토큰은 계속 막습니다."""
    if exp is None:
        return datetime.max.replace(tzinfo=timezone.utc)
    return datetime.fromtimestamp(exp, tz=timezone.utc)
