# petpass/services/session_service.py
import logging
from typing import Callable, List, Optional

from petpass.models.user import User
from petpass.services.identity_service import IdentityProvider

SessionListener = Callable[[Optional[User]], None]


class SessionContext:
    """
    현재 로그인 사용자를 담는 명시적인 세션 객체.
    전역 상태 대신 이 객체를 서비스 호출부에 직접 전달합니다.

    생명주기: init() -> (sign_in / sign_out ...) -> dispose()
    with 문으로 사용하면 자동으로 init/dispose 됩니다.
    restore=False이면 init()에서 제공자가 기억하는 사용자를 불러오지 않습니다 (서버 요청 처리용).
    """

    def __init__(self, provider: Optional[IdentityProvider] = None, user: Optional[User] = None,
                 restore: bool = True):
        self.provider = provider
        self.user = user
        self.restore = restore
        self.loading = True
        self._listeners: List[SessionListener] = []
        self._disposed = False

    @classmethod
    def for_user(cls, user: Optional[User]) -> "SessionContext":
        """이미 인증된 사용자(예: JWT로 확인된 요청)로 세션을 만듭니다."""
        return cls(user=user).init()

    def init(self) -> "SessionContext":
        """제공자가 기억하는 사용자를 복원하고 loading 상태를 해제합니다."""
        self.loading = True
        if self.restore and self.user is None and self.provider is not None:
            self.user = self.provider.current_user()
        self.loading = False
        self._notify()
        return self

    def dispose(self) -> None:
        """구독을 모두 해제하고 세션을 닫습니다. 닫힌 세션은 사용자를 갖지 않습니다."""
        self._listeners.clear()
        self.user = None
        self._disposed = True

    def __enter__(self) -> "SessionContext":
        return self.init()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    # --- 구독 ---
    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """사용자 변경 알림을 구독합니다. 반환된 함수를 호출하면 구독이 해제됩니다."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.user)

    # --- 조회 ---
    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def current_user_id(self) -> Optional[str]:
        return self.user.uid if self.user else None

    # --- 인증 동작 (제공자에 위임) ---
    def _require_provider(self) -> IdentityProvider:
        if self._disposed:
            raise RuntimeError("이미 종료된 세션입니다.")
        if self.provider is None:
            raise RuntimeError("인증 제공자가 설정되지 않은 세션입니다.")
        return self.provider

    def _set_user(self, user: Optional[User]) -> Optional[User]:
        self.user = user
        self._notify()
        return user

    def sign_in(self, email: str, password: str) -> User:
        return self._set_user(self._require_provider().sign_in(email, password))

    def sign_up(self, email: str, password: str) -> User:
        return self._set_user(self._require_provider().sign_up(email, password))

    def sign_in_with_google(self, id_token: Optional[str] = None) -> User:
        return self._set_user(self._require_provider().sign_in_with_google(id_token))

    def sign_in_with_apple(self, id_token: Optional[str] = None) -> User:
        return self._set_user(self._require_provider().sign_in_with_apple(id_token))

    def sign_out(self) -> None:
        provider = self._require_provider()
        uid = self.current_user_id()
        provider.sign_out(uid)
        logging.info(f"Session signed out (uid: {uid})")
        self._set_user(None)
