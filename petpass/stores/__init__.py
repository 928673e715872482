"""
반려동물 레코드 저장소

- LocalPetStore: 데모 빌드용 로컬 key/value 저장소 (인라인 이미지 그대로 저장)
- FirestorePetStore: Firestore + Firebase Storage 원격 저장소
"""

from .base import PetStore
from .kv_store import LocalKeyValueStore
from .local_store import LocalPetStore

__all__ = ['PetStore', 'LocalKeyValueStore', 'LocalPetStore']
