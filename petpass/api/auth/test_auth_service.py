# petpass/api/auth/test_auth_service.py
"""AuthService 로그아웃/무효화 목록 테스트"""

import time

from petpass.api.auth.services import AuthService
from petpass.models.user import User
from petpass.services.identity_service import LocalIdentityProvider, CURRENT_USER_KEY
from petpass.stores.kv_store import LocalKeyValueStore
from petpass.stores.token_blocklist import LocalTokenBlocklist


def _auth_service(kv_store: LocalKeyValueStore) -> AuthService:
    return AuthService(LocalIdentityProvider(kv_store, remember_user=False), LocalTokenBlocklist(kv_store))


def test_revocation_survives_new_service_instance(tmp_path):
    path = str(tmp_path / 'kv.json')
    user = User(uid='u1', email='kim@example.com')
    _auth_service(LocalKeyValueStore(path=path)).sign_out(user, 'jti-1', int(time.time()) + 900)

    restarted = _auth_service(LocalKeyValueStore(path=path))
    assert restarted.is_token_revoked({'jti': 'jti-1'})
    assert not restarted.is_token_revoked({'jti': 'jti-2'})


def test_expired_token_is_not_kept(kv_store):
    service = _auth_service(kv_store)
    service.sign_out(User(uid='u1', email='kim@example.com'), 'jti-old', int(time.time()) - 60)
    assert not service.is_token_revoked({'jti': 'jti-old'})


def test_server_provider_does_not_keep_current_user(kv_store):
    provider = LocalIdentityProvider(kv_store, remember_user=False)
    provider.sign_up('kim@example.com', 'secret123')
    provider.sign_in('kim@example.com', 'secret123')

    assert kv_store.get_item(CURRENT_USER_KEY) is None
    assert provider.current_user() is None
