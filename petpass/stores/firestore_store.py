# petpass/stores/firestore_store.py
import copy
import uuid
import logging
from typing import Any, Dict, List, Optional
from firebase_admin import firestore
from firebase_admin.firestore import Transaction
from google.api_core import exceptions as gcp_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter

from petpass.core.exceptions import (
    PetPassError, NotFoundError, PetAlreadyExistsError, QuotaExceededError, StorageFailureError,
    VersionConflictError
)
from petpass.models.pet import Pet, apply_partial, mutable_fields_of
from petpass.services.image_service import is_inline
from petpass.services.storage_service import StorageService
from petpass.stores.base import PetStore
from petpass.utils.datetime_utils import DateTimeUtils

# (섹션, 필드, 저장 파일명) - 레코드당 하나뿐인 이미지
SINGLE_IMAGE_FIELDS = (
    ('owner', 'photoUrl', 'owner.jpg'),
    ('profile', 'photoUrl', 'profile.jpg'),
    ('travel', 'rabiesCertificate', 'travel/rabies_certificate.jpg'),
    ('travel', 'healthCertificate', 'travel/health_certificate.jpg'),
)
# (섹션, 필드, 저장 폴더) - 여러 장을 담는 이미지 목록
LIST_IMAGE_FIELDS = (
    ('profile', 'photos', 'photos'),
    ('health', 'vaccinationImages', 'vaccinations'),
    ('health', 'prescriptions', 'prescriptions'),
    ('health', 'certifications', 'certifications'),
)


class FirestorePetStore(PetStore):
    """
    Firestore 'pets' 컬렉션 + Firebase Storage를 사용하는 원격 저장소.
    레코드에는 이미지 URL만 저장하고, 인라인 이미지는 커밋 전에 Storage로 승격합니다.
    """

    def __init__(self, storage_service: StorageService, db=None):
        self.db = db or firestore.client()
        self.pets_ref = self.db.collection('pets')
        self.storage_service = storage_service
        logging.info("FirestorePetStore initialized.")

    # --- 이미지 승격 ---
    def _promote_images(self, pet_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        data(전체 레코드 또는 부분 업데이트) 안의 인라인 이미지를 모두 업로드하고
        URL로 치환한 사본을 반환합니다.
        목록 필드는 기존 URL을 앞에 유지하고 새로 업로드한 URL을 뒤에 이어 붙입니다.
        """
        data = copy.deepcopy(data)
        uploaded: Dict[str, str] = {}
        stamp = DateTimeUtils.to_timestamp_ms()

        for section, key, folder in LIST_IMAGE_FIELDS:
            images = (data.get(section) or {}).get(key)
            if not images:
                continue
            inline_images = [img for img in images if is_inline(img)]
            if not inline_images:
                continue
            existing = [img for img in images if not is_inline(img)]
            new_urls = []
            for index, image in enumerate(inline_images):
                url = self.storage_service.upload_data_url(image, f"pets/{pet_id}/{folder}/{stamp}_{index}.jpg")
                uploaded.setdefault(image, url)
                new_urls.append(url)
            data[section][key] = existing + new_urls

        for section, key, filename in SINGLE_IMAGE_FIELDS:
            image = (data.get(section) or {}).get(key)
            if not is_inline(image):
                continue
            # 대표 사진이 photos[0]과 같으면 방금 올린 URL을 그대로 사용
            data[section][key] = uploaded.get(image) or self.storage_service.upload_data_url(
                image, f"pets/{pet_id}/{filename}"
            )

        vaccinations = (data.get('health') or {}).get('vaccinations') or []
        for index, vaccination in enumerate(vaccinations):
            certificate = vaccination.get('certificate')
            if is_inline(certificate):
                vaccination['certificate'] = self.storage_service.upload_data_url(
                    certificate, f"pets/{pet_id}/vaccinations/{stamp}_certificate_{index}.jpg"
                )

        return data

    @staticmethod
    def _translate_error(e: Exception, action: str) -> PetPassError:
        """Firestore 오류를 도메인 예외로 변환합니다."""
        if isinstance(e, gcp_exceptions.ResourceExhausted):
            return QuotaExceededError()
        if isinstance(e, gcp_exceptions.InvalidArgument) and 'exceeds the maximum allowed size' in str(e):
            return QuotaExceededError()
        logging.error(f"Firestore {action} 실패: {e}", exc_info=True)
        return StorageFailureError()

    # --- CRUD ---
    def _exists(self, pet_ref, action: str) -> bool:
        try:
            return pet_ref.get().exists
        except Exception as e:
            raise self._translate_error(e, action)

    def create(self, pet: Pet) -> Pet:
        if pet.pet_id:
            # 기존 레코드의 폴더에 이미지를 올리기 전에 중복 확인
            if self._exists(self.pets_ref.document(pet.pet_id), f"create (pet_id: {pet.pet_id})"):
                raise PetAlreadyExistsError(f"이미 존재하는 petId입니다: {pet.pet_id}")
        else:
            pet.pet_id = str(uuid.uuid4())
        pet.created_at = pet.updated_at = DateTimeUtils.now_iso()
        pet.version = 1

        data = self._promote_images(pet.pet_id, pet.to_dict())
        try:
            # create()는 문서가 이미 있으면 AlreadyExists로 실패함
            self.pets_ref.document(pet.pet_id).create(data)
        except gcp_exceptions.AlreadyExists:
            raise PetAlreadyExistsError(f"이미 존재하는 petId입니다: {pet.pet_id}")
        except Exception as e:
            raise self._translate_error(e, f"create (pet_id: {pet.pet_id})")

        logging.info(f"Pet created in Firestore: {pet.pet_id} (owner: {pet.owner_id})")
        return Pet.from_dict(data)

    def get_by_id(self, pet_id: str) -> Optional[Pet]:
        try:
            doc = self.pets_ref.document(pet_id).get()
        except Exception as e:
            raise self._translate_error(e, f"get (pet_id: {pet_id})")
        if not doc.exists:
            return None
        return Pet.from_dict(DateTimeUtils.from_firestore(doc.to_dict()))

    def list_by_owner(self, owner_id: str) -> List[Pet]:
        try:
            docs = self.pets_ref.where(filter=FieldFilter("ownerId", "==", owner_id)).stream()
            return [Pet.from_dict(DateTimeUtils.from_firestore(doc.to_dict())) for doc in docs]
        except Exception as e:
            raise self._translate_error(e, f"list (owner_id: {owner_id})")

    def update(self, pet_id: str, partial: Dict[str, Any],
               expected_version: Optional[int] = None) -> Pet:
        pet_ref = self.pets_ref.document(pet_id)
        # 없는 레코드에 대해 이미지를 올려 고아 파일이 남지 않도록 먼저 확인
        if not self._exists(pet_ref, f"update (pet_id: {pet_id})"):
            raise NotFoundError()
        # 업로드는 네트워크 작업이므로 재시도될 수 있는 트랜잭션 밖에서 먼저 수행
        changes = self._promote_images(pet_id, mutable_fields_of(partial))
        transaction = self.db.transaction()

        @firestore.transactional
        def _update_in_transaction(transaction: Transaction) -> Dict[str, Any]:
            snapshot = pet_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise NotFoundError()
            current = DateTimeUtils.from_firestore(snapshot.to_dict())
            if expected_version is not None and current.get('version', 1) != expected_version:
                raise VersionConflictError()

            update_data = dict(changes)
            update_data['updatedAt'] = DateTimeUtils.later_than(current.get('updatedAt'))
            update_data['version'] = current.get('version', 1) + 1
            transaction.update(pet_ref, update_data)

            merged = apply_partial(current, changes)
            merged.update(updatedAt=update_data['updatedAt'], version=update_data['version'])
            return merged

        try:
            merged = _update_in_transaction(transaction)
        except PetPassError:
            raise
        except Exception as e:
            raise self._translate_error(e, f"update (pet_id: {pet_id})")

        logging.info(f"Pet updated in Firestore: {pet_id} with fields: {list(changes.keys())}")
        return Pet.from_dict(merged)

    def delete(self, pet_id: str) -> bool:
        pet_ref = self.pets_ref.document(pet_id)
        try:
            if not pet_ref.get().exists:
                return False
            pet_ref.delete()
        except Exception as e:
            raise self._translate_error(e, f"delete (pet_id: {pet_id})")

        # 문서 삭제 후 업로드된 이미지도 정리. 실패해도 문서 삭제는 되돌리지 않음
        try:
            self.storage_service.delete_prefix(f"pets/{pet_id}/")
        except Exception as e:
            logging.error(f"Storage 정리 실패 (pet_id: {pet_id}): {e}", exc_info=True)

        logging.info(f"Pet deleted from Firestore: {pet_id}")
        return True
