# petpass/core/exceptions.py
"""
PetPass 도메인 예외.

저장소(Record Store)와 이미지 처리 계층은 오류를 삼키지 않고 아래의 타입으로 변환해
호출자에게 전달합니다. HTTP 응답으로의 변환은 앱 팩토리의 전역 에러 핸들러가 담당합니다.
"""

from typing import Optional


class PetPassError(Exception):
    """모든 PetPass 도메인 예외의 기반 클래스."""
    error_code = "PETPASS_ERROR"
    status_code = 500
    default_message = "요청을 처리하는 중 오류가 발생했습니다."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error_code": self.error_code, "message": self.message}


class NotFoundError(PetPassError):
    """요청한 petId가 존재하지 않습니다."""
    error_code = "PET_NOT_FOUND"
    status_code = 404
    default_message = "해당 ID의 반려동물을 찾을 수 없습니다."


class QuotaExceededError(PetPassError):
    """저장소 용량 한도를 초과했습니다."""
    error_code = "STORAGE_QUOTA_EXCEEDED"
    status_code = 507
    default_message = "저장 공간이 부족합니다. 더 작은 이미지를 사용하거나 일부 반려동물 정보를 삭제해 주세요."


class StorageFailureError(PetPassError):
    """용량 초과 이외의 모든 저장 실패."""
    error_code = "STORAGE_FAILURE"
    status_code = 500
    default_message = "데이터 저장 중 오류가 발생했습니다. 잠시 후 다시 시도해 주세요."


class ValidationFailureError(PetPassError):
    """필수 항목 누락 또는 잘못된 입력."""
    error_code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "입력 값이 올바르지 않습니다."


class ImageProcessingError(ValidationFailureError):
    error_code = "INVALID_IMAGE"
    default_message = "이미지를 처리할 수 없습니다. 다른 파일을 선택해 주세요."


class PhotoLimitExceededError(ValidationFailureError):
    error_code = "PHOTO_LIMIT_EXCEEDED"
    default_message = "반려동물 사진은 최대 3장까지 등록할 수 있습니다."


class AuthFailureError(PetPassError):
    """인증 제공자가 자격 증명을 거부했습니다."""
    error_code = "AUTH_FAILED"
    status_code = 401
    default_message = "인증에 실패했습니다."


class VersionConflictError(PetPassError):
    """기대한 버전과 저장된 버전이 다릅니다 (다른 곳에서 먼저 수정됨)."""
    error_code = "VERSION_CONFLICT"
    status_code = 409
    default_message = "다른 곳에서 먼저 수정되었습니다. 최신 정보를 불러온 뒤 다시 시도해 주세요."


class PetAlreadyExistsError(PetPassError):
    """지정한 petId의 레코드가 이미 있습니다."""
    error_code = "PET_ALREADY_EXISTS"
    status_code = 409
    default_message = "이미 존재하는 반려동물 ID입니다."
