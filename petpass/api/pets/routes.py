# petpass/api/pets/routes.py
import io
import logging
from flask import Blueprint, request, jsonify, current_app, send_file
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from petpass.api.auth.services import request_session
from petpass.core.exceptions import ValidationFailureError
from petpass.services.image_service import decode_data_url
from .schemas import (
    PetRegistrationSchema, PetUpdateSchema, DocumentCategorySchema, ImageUploadSchema, ShareResponseSchema
)

pets_bp = Blueprint('pets_bp', __name__)


def _uploaded_images(field_name: str, json_key: str):
    """
    multipart 파일(field_name) 또는 JSON 본문의 data URL(json_key)에서 원본 이미지 바이트 목록을 읽습니다.
    """
    files = [f for f in request.files.getlist(field_name) if f and f.filename]
    if files:
        return [f.read() for f in files]

    # 객체가 아닌 본문이나 문자열이 아닌 값은 ValidationError(400)로 처리됨
    payload = ImageUploadSchema().load(request.get_json(silent=True) or {})
    refs = payload.get(json_key)
    if isinstance(refs, str):
        refs = [refs]
    if not refs:
        raise ValidationFailureError("업로드할 이미지 파일이 없습니다.")
    return [decode_data_url(ref)[1] for ref in refs]


@pets_bp.route('/', methods=['POST'])
@jwt_required()
def register_pet():
    """반려동물 여권 최초 등록 API."""
    pet_service = current_app.services['pets']
    try:
        validated_data = PetRegistrationSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    new_pet = pet_service.register_pet(request_session(), validated_data)
    return jsonify(new_pet.to_dict()), 201


@pets_bp.route('/', methods=['GET'])
@jwt_required()
def list_my_pets():
    """로그인한 사용자의 반려동물 목록."""
    pets = current_app.services['pets'].list_my_pets(request_session())
    return jsonify({"pets": [pet.to_dict() for pet in pets]}), 200


@pets_bp.route('/<string:pet_id>', methods=['GET'])
@jwt_required(optional=True)
def get_pet(pet_id: str):
    """
    소유자에게는 전체 정보를, 방문자에게는 공개 설정일 때만 공개 프로필을 보여줍니다.
    QR 코드로 들어온 비로그인 방문자도 호출합니다.
    """
    result = current_app.services['pets'].get_pet_view(request_session(), pet_id)
    if result.is_denied:
        return jsonify({"error_code": "PROFILE_PRIVATE", "message": "비공개로 설정된 프로필입니다."}), 403
    return jsonify({"view": result.kind.value, "pet": result.data}), 200


@pets_bp.route('/<string:pet_id>', methods=['PATCH'])
@jwt_required()
def update_pet(pet_id: str):
    """[소유자 전용] 반려동물 정보 부분 업데이트."""
    pet_service = current_app.services['pets']
    try:
        update_data = PetUpdateSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    expected_version = update_data.pop('expected_version', None)
    updated_pet = pet_service.update_pet_profile(request_session(), pet_id, update_data, expected_version)
    return jsonify(updated_pet.to_dict()), 200


@pets_bp.route('/<string:pet_id>', methods=['DELETE'])
@jwt_required()
def delete_pet(pet_id: str):
    current_app.services['pets'].delete_pet(request_session(), pet_id)
    return '', 204


@pets_bp.route('/<string:pet_id>/photos', methods=['POST'])
@jwt_required()
def add_pet_photo(pet_id: str):
    """[소유자 전용] 대표 사진 추가 (multipart 'file' 또는 JSON {"image": data URL})."""
    raw_images = _uploaded_images('file', 'image')
    if len(raw_images) != 1:
        raise ValidationFailureError("사진은 한 번에 한 장씩 추가할 수 있습니다.")
    updated_pet = current_app.services['pets'].add_photo(request_session(), pet_id, raw_images[0])
    return jsonify(updated_pet.to_dict()), 200


@pets_bp.route('/<string:pet_id>/photos/<int:index>', methods=['DELETE'])
@jwt_required()
def remove_pet_photo(pet_id: str, index: int):
    updated_pet = current_app.services['pets'].remove_photo(request_session(), pet_id, index)
    return jsonify(updated_pet.to_dict()), 200


@pets_bp.route('/<string:pet_id>/documents/<string:category>', methods=['POST'])
@jwt_required()
def add_pet_documents(pet_id: str, category: str):
    """[소유자 전용] 접종/처방/증명서 이미지 추가 (multipart 'files' 또는 JSON {"images": [...]})."""
    try:
        DocumentCategorySchema().load({"category": category})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    raw_images = _uploaded_images('files', 'images')
    updated_pet = current_app.services['pets'].add_documents(request_session(), pet_id, category, raw_images)
    return jsonify(updated_pet.to_dict()), 200


@pets_bp.route('/<string:pet_id>/share', methods=['GET'])
def get_share_info(pet_id: str):
    """공유 링크와 QR 코드(data URL)."""
    share_info = current_app.services['pets'].get_share_info(pet_id)
    return jsonify(ShareResponseSchema().dump(share_info)), 200


@pets_bp.route('/<string:pet_id>/share/qr.png', methods=['GET'])
def get_share_qr(pet_id: str):
    png = current_app.services['pets'].get_share_qr_png(pet_id)
    logging.info(f"QR code served for pet {pet_id}")
    return send_file(io.BytesIO(png), mimetype='image/png', download_name=f"{pet_id}-qr.png")
