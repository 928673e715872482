# petpass/api/auth/schemas.py
from marshmallow import Schema, fields, validate


class CredentialsSchema(Schema):
    """이메일/비밀번호 회원가입 및 로그인 요청 스키마"""
    email = fields.Email(required=True)
    password = fields.Str(
        required=True,
        load_only=True,
        validate=validate.Length(min=6, error="비밀번호는 6자 이상이어야 합니다.")
    )


class SocialLoginSchema(Schema):
    """소셜 로그인 요청의 유효성을 검사하는 스키마"""
    provider = fields.Str(
        required=True,
        validate=validate.OneOf(['google', 'apple']),
        metadata={"description": "소셜 로그인 제공자 (google 또는 apple)"}
    )
    # 데모 인증에서는 생략 가능, Firebase 인증에서는 필수
    id_token = fields.Str(
        load_default=None,
        metadata={"description": "클라이언트 SDK가 발급한 Firebase ID 토큰"}
    )


class UserResponseSchema(Schema):
    uid = fields.Str(required=True)
    email = fields.Str()
    display_name = fields.Str(data_key="displayName", allow_none=True)
    photo_url = fields.Str(data_key="photoURL", allow_none=True)
