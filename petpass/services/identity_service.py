# petpass/services/identity_service.py
import logging
from abc import ABC, abstractmethod
from typing import Optional
from firebase_admin import auth as firebase_auth
from werkzeug.security import generate_password_hash, check_password_hash

from petpass.core.exceptions import AuthFailureError
from petpass.models.user import User
from petpass.stores.kv_store import LocalKeyValueStore
from petpass.utils.datetime_utils import DateTimeUtils

USERS_KEY = 'demo_users'
CURRENT_USER_KEY = 'demo_user'


class IdentityProvider(ABC):
    """
    인증 제공자 계약. 각 로그인 동작은 세션 사용자(User)를 돌려주고, sign_out은 세션을 비웁니다.
    자격 증명이 거부되면 AuthFailureError를 발생시킵니다.
    """

    @abstractmethod
    def sign_in(self, email: str, password: str) -> User: ...

    @abstractmethod
    def sign_up(self, email: str, password: str) -> User: ...

    @abstractmethod
    def sign_in_with_google(self, id_token: Optional[str] = None) -> User: ...

    @abstractmethod
    def sign_in_with_apple(self, id_token: Optional[str] = None) -> User: ...

    @abstractmethod
    def sign_out(self, uid: Optional[str] = None) -> None: ...

    def current_user(self) -> Optional[User]:
        """제공자가 기억하고 있는 마지막 로그인 사용자. 기본 구현은 기억하지 않습니다."""
        return None


class LocalIdentityProvider(IdentityProvider):
    """
    데모 빌드용 인증 제공자.
    사용자 목록은 'demo_users', 현재 로그인 사용자는 'demo_user' 키에 로컬 저장소로 보관합니다.
    소셜 로그인은 실제 인증 없이 데모 사용자를 만들어 흉내 냅니다.

    remember_user=False이면 'demo_user'를 읽거나 쓰지 않습니다.
    여러 사용자가 같은 저장소를 쓰는 API 서버에서는 현재 사용자를 JWT로만 식별합니다.
    """

    def __init__(self, kv_store: LocalKeyValueStore, remember_user: bool = True):
        self.kv = kv_store
        self.remember_user = remember_user

    def _remember(self, user: User) -> User:
        if self.remember_user:
            self.kv.set_json(CURRENT_USER_KEY, user.to_dict())
        return user

    def sign_in(self, email: str, password: str) -> User:
        users = self.kv.get_json(USERS_KEY, [])
        existing = next((u for u in users if u.get('email') == email), None)
        if not existing:
            raise AuthFailureError("등록되지 않은 사용자입니다. 먼저 회원가입을 해 주세요.")
        if not check_password_hash(existing.get('passwordHash', ''), password):
            raise AuthFailureError("비밀번호가 올바르지 않습니다.")
        return self._remember(User.from_dict(existing))

    def sign_up(self, email: str, password: str) -> User:
        with self.kv.lock:
            users = self.kv.get_json(USERS_KEY, [])
            if any(u.get('email') == email for u in users):
                raise AuthFailureError("이미 가입된 이메일입니다.")

            stamp = DateTimeUtils.to_timestamp_ms()
            taken = {u.get('uid') for u in users}
            while f"demo_{stamp}" in taken:
                stamp += 1
            user = User(
                uid=f"demo_{stamp}",
                email=email,
                display_name=email.split('@')[0]
            )
            record = user.to_dict()
            record['passwordHash'] = generate_password_hash(password)
            users.append(record)
            self.kv.set_json(USERS_KEY, users)

        logging.info(f"Demo user signed up: {user.uid}")
        return self._remember(user)

    def sign_in_with_google(self, id_token: Optional[str] = None) -> User:
        return self._remember(User(
            uid=f"demo_google_{DateTimeUtils.to_timestamp_ms()}",
            email='demo@google.com',
            display_name='Demo Google User'
        ))

    def sign_in_with_apple(self, id_token: Optional[str] = None) -> User:
        return self._remember(User(
            uid=f"demo_apple_{DateTimeUtils.to_timestamp_ms()}",
            email='demo@apple.com',
            display_name='Demo Apple User'
        ))

    def sign_out(self, uid: Optional[str] = None) -> None:
        if self.remember_user:
            self.kv.remove_item(CURRENT_USER_KEY)

    def current_user(self) -> Optional[User]:
        if not self.remember_user:
            return None
        data = self.kv.get_json(CURRENT_USER_KEY)
        return User.from_dict(data) if data else None


class FirebaseIdentityProvider(IdentityProvider):
    """
    Firebase Auth 기반 인증 제공자.
    클라이언트 SDK가 발급한 Firebase ID 토큰을 검증하여 사용자를 확인합니다.
    비밀번호 로그인은 클라이언트 SDK에서만 가능하므로 서버에서는 지원하지 않습니다.
    """

    def _verify(self, id_token: Optional[str], provider: str) -> User:
        if not id_token:
            raise AuthFailureError("ID 토큰이 필요합니다.")
        try:
            decoded = firebase_auth.verify_id_token(id_token)
        except (ValueError, firebase_auth.InvalidIdTokenError, firebase_auth.ExpiredIdTokenError,
                firebase_auth.RevokedIdTokenError, firebase_auth.CertificateFetchError) as e:
            logging.warning(f"Firebase ID 토큰 검증 실패 ({provider}): {e}")
            raise AuthFailureError("유효하지 않은 인증 토큰입니다.")
        return User(
            uid=decoded['uid'],
            email=decoded.get('email', ''),
            display_name=decoded.get('name'),
            photo_url=decoded.get('picture')
        )

    def sign_in(self, email: str, password: str) -> User:
        raise AuthFailureError("이메일 로그인은 클라이언트에서 Firebase ID 토큰을 발급받아 진행해 주세요.")

    def sign_up(self, email: str, password: str) -> User:
        try:
            record = firebase_auth.create_user(email=email, password=password)
        except firebase_auth.EmailAlreadyExistsError:
            raise AuthFailureError("이미 가입된 이메일입니다.")
        except ValueError as e:
            raise AuthFailureError(str(e))
        logging.info(f"Firebase Auth 사용자 생성: {record.uid}")
        return User(uid=record.uid, email=record.email, display_name=record.display_name)

    def sign_in_with_google(self, id_token: Optional[str] = None) -> User:
        return self._verify(id_token, 'google')

    def sign_in_with_apple(self, id_token: Optional[str] = None) -> User:
        return self._verify(id_token, 'apple')

    def sign_out(self, uid: Optional[str] = None) -> None:
        if not uid:
            return
        try:
            firebase_auth.revoke_refresh_tokens(uid)
        except firebase_auth.UserNotFoundError:
            logging.warning(f"Firebase Auth에 없는 사용자입니다 (uid: {uid}).")
