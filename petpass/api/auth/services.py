# petpass/api/auth/services.py
import logging
from typing import Dict, Any, Optional
from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity

from petpass.models.user import User
from petpass.services.identity_service import IdentityProvider
from petpass.services.session_service import SessionContext
from petpass.stores.token_blocklist import TokenBlocklist, expiry_from_claim


def request_session() -> SessionContext:
    """
    현재 요청의 JWT로 확인된 사용자로 세션을 만듭니다.
    토큰이 없는 요청(jwt_required(optional=True))이면 비로그인 세션이 됩니다.
    """
    user_id = get_jwt_identity()
    if not user_id:
        return SessionContext.for_user(None)
    claims = get_jwt()
    return SessionContext.for_user(User(
        uid=user_id,
        email=claims.get('email', ''),
        display_name=claims.get('name')
    ))


class AuthService:
    """인증 제공자를 통해 로그인/회원가입을 처리하고 JWT를 발급/무효화합니다."""

    def __init__(self, provider: Optional[IdentityProvider] = None, blocklist: Optional[TokenBlocklist] = None):
        self.provider = provider
        self.blocklist = blocklist

    def _session(self) -> SessionContext:
        # 요청마다 비어 있는 세션에서 시작하며 제공자가 기억하는 사용자를 복원하지 않음
        return SessionContext(provider=self.provider, user=None, restore=False)

    @staticmethod
    def _issue(user: User) -> Dict[str, Any]:
        access_token = create_access_token(
            identity=user.uid,
            additional_claims={"email": user.email, "name": user.display_name}
        )
        return {"access_token": access_token, "user": user}

    def sign_up(self, email: str, password: str) -> Dict[str, Any]:
        with self._session() as session:
            return self._issue(session.sign_up(email, password))

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        with self._session() as session:
            return self._issue(session.sign_in(email, password))

    def social_sign_in(self, provider_name: str, id_token: Optional[str] = None) -> Dict[str, Any]:
        with self._session() as session:
            if provider_name == 'apple':
                user = session.sign_in_with_apple(id_token)
            else:
                user = session.sign_in_with_google(id_token)
            return self._issue(user)

    def sign_out(self, user: Optional[User], jti: str, exp: Optional[int] = None) -> None:
        """제공자 세션을 정리하고 현재 액세스 토큰을 만료 시각까지 무효화 목록에 추가합니다."""
        with SessionContext(provider=self.provider, user=user, restore=False) as session:
            session.sign_out()
        self.blocklist.add(jti, expiry_from_claim(exp))
        logging.info(f"사용자 로그아웃 처리 완료. JTI: {jti[:8]}...")

    # --- Blocklist 관련 로직 ---
    def is_token_revoked(self, jwt_payload: dict) -> bool:
        """jti를 이용해 해당 토큰이 무효화 목록에 있는지 확인합니다."""
        return self.blocklist.contains(jwt_payload.get('jti'))
