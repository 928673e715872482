# petpass/stores/base.py
"""반려동물 레코드 저장소의 공통 계약."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from petpass.models.pet import Pet


class PetStore(ABC):
    """
    Pet 레코드를 petId로 저장/조회하는 저장소 계약.

    Firestore(원격 문서 DB + Storage)와 로컬 key/value 저장소 두 구현이 있으며,
    서비스 계층은 이 인터페이스에만 의존합니다.
    용량 초과는 QuotaExceededError, 그 외 저장 실패는 StorageFailureError로 전달합니다.
    """

    @abstractmethod
    def create(self, pet: Pet) -> Pet:
        """
        새 레코드를 저장하고 저장된 Pet을 반환합니다.
        petId가 비어 있으면 새로 발급하며, createdAt == updatedAt, version = 1로 설정합니다.
        지정한 petId가 이미 있으면 PetAlreadyExistsError를 발생시킵니다.
        """

    @abstractmethod
    def get_by_id(self, pet_id: str) -> Optional[Pet]:
        """petId로 레코드를 조회합니다. 없으면 None."""

    @abstractmethod
    def list_by_owner(self, owner_id: str) -> List[Pet]:
        """소유자의 모든 레코드를 조회합니다."""

    @abstractmethod
    def update(self, pet_id: str, partial: Dict[str, Any],
               expected_version: Optional[int] = None) -> Pet:
        """
        저장된 레코드에 부분 업데이트(camelCase 딕셔너리)를 병합하고 결과를 반환합니다.

        :param expected_version: 지정하면 저장된 version과 다를 때 VersionConflictError
        :raises NotFoundError: pet_id가 없는 경우
        """

    @abstractmethod
    def delete(self, pet_id: str) -> bool:
        """레코드를 삭제합니다. 삭제한 레코드가 있었으면 True."""
