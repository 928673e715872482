# petpass/stores/test_token_blocklist.py
"""무효화 토큰 목록 테스트 (로컬 key/value 저장소, 메모리 기반 가짜 Firestore)"""

import copy
import pytest
from datetime import timedelta

from petpass.stores.kv_store import LocalKeyValueStore
from petpass.stores.token_blocklist import (
    LocalTokenBlocklist, FirestoreTokenBlocklist, REVOKED_TOKENS_KEY, expiry_from_claim
)
from petpass.utils.datetime_utils import DateTimeUtils


# --- Firestore 가짜 객체 ---
class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self._data = copy.deepcopy(data)

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeDocumentRef:
    def __init__(self, collection, doc_id):
        self.collection = collection
        self.id = doc_id

    def get(self):
        return FakeSnapshot(self, self.collection.docs.get(self.id))

    def set(self, data):
        self.collection.docs[self.id] = copy.deepcopy(data)

    def delete(self):
        self.collection.docs.pop(self.id, None)


class FakeQuery:
    def __init__(self, collection, field_filter):
        self.collection = collection
        self.field_filter = field_filter

    def stream(self):
        f = self.field_filter
        assert f.op_string == '<='
        for doc_id, data in list(self.collection.docs.items()):
            if data[f.field_path] <= f.value:
                yield FakeSnapshot(FakeDocumentRef(self.collection, doc_id), data)


class FakeCollection:
    def __init__(self):
        self.docs = {}

    def document(self, doc_id):
        return FakeDocumentRef(self, doc_id)

    def where(self, filter=None):
        return FakeQuery(self, filter)


class FakeFirestore:
    def __init__(self):
        self.revoked_tokens = FakeCollection()

    def collection(self, name):
        assert name == 'revoked_tokens'
        return self.revoked_tokens


def _in(minutes: int):
    return DateTimeUtils.now() + timedelta(minutes=minutes)


@pytest.fixture
def local_blocklist(kv_store):
    return LocalTokenBlocklist(kv_store)


def test_local_revocation_is_persisted(tmp_path):
    path = str(tmp_path / 'kv.json')
    LocalTokenBlocklist(LocalKeyValueStore(path=path)).add('jti-1', _in(15))

    reopened = LocalTokenBlocklist(LocalKeyValueStore(path=path))
    assert reopened.contains('jti-1')
    assert not reopened.contains('jti-2')


def test_local_expired_entries_are_dropped(local_blocklist, kv_store):
    kv_store.set_json(REVOKED_TOKENS_KEY, {'old': _in(-1).timestamp()})
    assert not local_blocklist.contains('old')

    local_blocklist.add('new', _in(15))
    local_blocklist.add('already-expired', _in(-5))
    assert set(kv_store.get_json(REVOKED_TOKENS_KEY)) == {'new'}


def test_firestore_add_and_contains():
    db = FakeFirestore()
    blocklist = FirestoreTokenBlocklist(db=db)
    blocklist.add('jti-1', _in(15))

    assert blocklist.contains('jti-1')
    assert not blocklist.contains('jti-2')
    assert set(db.revoked_tokens.docs['jti-1']) == {'revoked_at', 'expires_at'}
    # 같은 컬렉션을 쓰는 새 인스턴스에서도 유지됨
    assert FirestoreTokenBlocklist(db=db).contains('jti-1')


def test_firestore_expired_entries_are_purged():
    db = FakeFirestore()
    db.revoked_tokens.docs['old'] = {'revoked_at': _in(-30), 'expires_at': _in(-1)}
    blocklist = FirestoreTokenBlocklist(db=db)

    assert not blocklist.contains('old')
    blocklist.add('new', _in(15))
    assert set(db.revoked_tokens.docs) == {'new'}


def test_expiry_from_claim():
    assert expiry_from_claim(0).timestamp() == 0
    assert expiry_from_claim(None) > _in(60 * 24 * 365)
