# petpass/api/pets/services.py
import logging
from typing import Dict, Any, List, Optional

# 도메인 모델
from petpass.models.pet import Pet, Health, Fun, Travel, PrivacySetting

# 저장소 및 공용 서비스
from petpass.core.exceptions import AuthFailureError, NotFoundError, ValidationFailureError
from petpass.services.image_service import ImageService
from petpass.services.session_service import SessionContext
from petpass.services.share_service import ShareService
from petpass.services.visibility_service import RenderResult, render, BIO_PREVIEW_LENGTH
from petpass.stores.base import PetStore

# 업로드 카테고리 -> Health 필드
DOCUMENT_FIELDS = {
    'vaccinations': 'vaccination_images',
    'prescriptions': 'prescriptions',
    'certifications': 'certifications',
}


class PetService:
    """반려동물 여권 정보의 등록/조회/수정/삭제와 사진 첨부, 공개 범위 판단을 담당하는 서비스."""

    def __init__(self,
                 pet_store: PetStore,
                 image_service: ImageService,
                 share_service: ShareService,
                 bio_preview_length: int = BIO_PREVIEW_LENGTH):
        self.pet_store = pet_store
        self.image_service = image_service
        self.share_service = share_service
        self.bio_preview_length = bio_preview_length
        logging.info("PetService initialized with dependencies.")

    # --- 내부 헬퍼 ---
    @staticmethod
    def _require_user_id(session: SessionContext) -> str:
        user_id = session.current_user_id()
        if not user_id:
            raise AuthFailureError("로그인이 필요합니다.")
        return user_id

    def _get_or_404(self, pet_id: str) -> Pet:
        pet = self.pet_store.get_by_id(pet_id)
        if not pet:
            raise NotFoundError()
        return pet

    def get_owned_pet(self, session: SessionContext, pet_id: str) -> Pet:
        """[소유자 전용] 반려동물을 조회합니다. 소유자가 아니면 PermissionError."""
        user_id = self._require_user_id(session)
        pet = self._get_or_404(pet_id)
        if pet.owner_id != user_id:
            raise PermissionError("이 반려동물 정보에 접근할 권한이 없습니다.")
        return pet

    # --- 등록 / 조회 ---
    def register_pet(self, session: SessionContext, pet_data: Dict[str, Any]) -> Pet:
        """
        검증된 등록 데이터로 새 Pet을 만들어 저장합니다.
        대표 사진은 photos[0]에서 유도합니다. 공유 링크는 저장하지 않고 get_share_info에서 계산합니다.
        """
        user_id = self._require_user_id(session)
        profile = pet_data['profile']
        profile.sync_photo_url()

        new_pet = Pet(
            owner_id=user_id,
            owner=pet_data['owner'],
            profile=profile,
            health=pet_data.get('health') or Health(),
            fun=pet_data.get('fun') or Fun(),
            travel=pet_data.get('travel') or Travel(),
            privacy=PrivacySetting(pet_data.get('privacy', PrivacySetting.PUBLIC.value))
        )
        created = self.pet_store.create(new_pet)

        logging.info(f"Pet registered: {created.pet_id} by user {user_id}")
        return created

    def list_my_pets(self, session: SessionContext) -> List[Pet]:
        """로그인한 사용자가 소유한 모든 반려동물을 조회합니다."""
        return self.pet_store.list_by_owner(self._require_user_id(session))

    def get_pet_view(self, session: SessionContext, pet_id: str) -> RenderResult:
        """
        보는 사람에 따라 전체/공개/거부 중 하나의 화면 데이터를 돌려줍니다.
        로그인하지 않은 방문자도 호출할 수 있습니다.
        """
        pet = self._get_or_404(pet_id)
        viewer_is_owner = session.current_user_id() is not None and session.current_user_id() == pet.owner_id
        return render(pet, viewer_is_owner, self.bio_preview_length)

    # --- 수정 / 삭제 ---
    def update_pet_profile(self, session: SessionContext, pet_id: str, update_data: Dict[str, Any],
                           expected_version: Optional[int] = None) -> Pet:
        """반려동물 정보를 부분 업데이트합니다. 포함된 섹션만 교체되고 나머지는 유지됩니다."""
        self.get_owned_pet(session, pet_id)
        if not update_data:
            raise ValidationFailureError("수정할 데이터가 제공되지 않았습니다.")

        partial = {}
        for key, value in update_data.items():
            if key == 'profile':
                value.sync_photo_url()
            partial[key] = value.to_dict() if hasattr(value, 'to_dict') else value

        return self.pet_store.update(pet_id, partial, expected_version=expected_version)

    def delete_pet(self, session: SessionContext, pet_id: str) -> None:
        self.get_owned_pet(session, pet_id)
        self.pet_store.delete(pet_id)
        logging.info(f"Pet deleted: {pet_id}")

    # --- 사진 / 서류 이미지 ---
    def add_photo(self, session: SessionContext, pet_id: str, raw_image: bytes) -> Pet:
        """
        대표 사진을 한 장 추가합니다 (최대 3장).
        원본 이미지는 축소/재인코딩되어 인라인으로 추가되고, 원격 저장소에서는 저장 시 URL로 승격됩니다.
        """
        pet = self.get_owned_pet(session, pet_id)
        encoded = self.image_service.downscale_and_encode(raw_image)
        pet.profile.photos = self.image_service.append_photo(pet.profile.photos, encoded)
        pet.profile.sync_photo_url()
        return self.pet_store.update(pet_id, {'profile': pet.profile.to_dict()}, expected_version=pet.version)

    def remove_photo(self, session: SessionContext, pet_id: str, index: int) -> Pet:
        pet = self.get_owned_pet(session, pet_id)
        if index < 0 or index >= len(pet.profile.photos):
            raise ValidationFailureError("존재하지 않는 사진 번호입니다.")
        pet.profile.photos = [photo for i, photo in enumerate(pet.profile.photos) if i != index]
        pet.profile.sync_photo_url()
        return self.pet_store.update(pet_id, {'profile': pet.profile.to_dict()}, expected_version=pet.version)

    def add_documents(self, session: SessionContext, pet_id: str, category: str,
                      raw_images: List[bytes]) -> Pet:
        """접종/처방/증명서 이미지를 추가합니다. 개수 제한은 없고 저장소 용량의 제한만 받습니다."""
        field_name = DOCUMENT_FIELDS.get(category)
        if not field_name:
            raise ValidationFailureError(f"'{category}'은(는) 유효한 서류 종류가 아닙니다.")
        if not raw_images:
            raise ValidationFailureError("업로드할 이미지가 없습니다.")

        pet = self.get_owned_pet(session, pet_id)
        encoded = [self.image_service.downscale_and_encode(raw) for raw in raw_images]
        existing = getattr(pet.health, field_name) or []
        setattr(pet.health, field_name, existing + encoded)
        return self.pet_store.update(pet_id, {'health': pet.health.to_dict()}, expected_version=pet.version)

    # --- 공유 ---
    def get_share_info(self, pet_id: str) -> Dict[str, str]:
        """공유 링크와 QR 코드(data URL)를 반환합니다."""
        self._get_or_404(pet_id)
        return {
            "pet_id": pet_id,
            "url": self.share_service.share_url(pet_id),
            "qr_code": self.share_service.qr_data_url(pet_id)
        }

    def get_share_qr_png(self, pet_id: str) -> bytes:
        self._get_or_404(pet_id)
        return self.share_service.qr_png(pet_id)
