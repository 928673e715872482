# petpass/api/auth/routes.py
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt
from marshmallow import ValidationError

from .schemas import CredentialsSchema, SocialLoginSchema, UserResponseSchema
from .services import request_session

auth_bp = Blueprint('auth_bp', __name__)


def _token_response(issued: dict) -> dict:
    return {
        "access_token": issued['access_token'],
        "user": UserResponseSchema().dump(issued['user'])
    }


@auth_bp.route('/signup', methods=['POST'])
def signup():
    """이메일/비밀번호 회원가입. 가입 즉시 로그인 상태가 됩니다."""
    try:
        data = CredentialsSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    issued = current_app.services['auth'].sign_up(data['email'], data['password'])
    return jsonify(_token_response(issued)), 201


@auth_bp.route('/signin', methods=['POST'])
def signin():
    try:
        data = CredentialsSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    issued = current_app.services['auth'].sign_in(data['email'], data['password'])
    return jsonify(_token_response(issued)), 200


@auth_bp.route('/social', methods=['POST'])
def social_login():
    """Google/Apple 소셜 로그인. Firebase 인증에서는 id_token이 필요합니다."""
    try:
        data = SocialLoginSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    issued = current_app.services['auth'].social_sign_in(data['provider'], data['id_token'])
    return jsonify(_token_response(issued)), 200


@auth_bp.route('/signout', methods=['POST'])
@jwt_required()
def signout():
    """로그아웃. 현재 액세스 토큰을 무효화 목록에 추가합니다."""
    claims = get_jwt()
    current_app.services['auth'].sign_out(request_session().user, claims['jti'], claims.get('exp'))
    return jsonify({"message": "로그아웃 되었습니다."}), 200


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def me():
    session = request_session()
    return jsonify({"user": UserResponseSchema().dump(session.user)}), 200
