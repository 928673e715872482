# petpass/stores/local_store.py
import logging
from typing import Any, Dict, List, Optional

from petpass.core.exceptions import NotFoundError, PetAlreadyExistsError, VersionConflictError
from petpass.models.pet import Pet, apply_partial
from petpass.stores.base import PetStore
from petpass.stores.kv_store import LocalKeyValueStore
from petpass.utils.datetime_utils import DateTimeUtils

PETS_KEY = 'demo_pets'


class LocalPetStore(PetStore):
    """
    데모 빌드용 저장소. 모든 Pet 레코드를 하나의 키('demo_pets') 아래 JSON 목록으로 보관합니다.
    인라인 이미지(data URL)도 변환 없이 그대로 저장합니다.
    """

    def __init__(self, kv_store: LocalKeyValueStore):
        self.kv = kv_store
        logging.info("LocalPetStore initialized.")

    def _load_all(self) -> List[Dict[str, Any]]:
        return self.kv.get_json(PETS_KEY, [])

    def _new_pet_id(self, pets: List[Dict[str, Any]]) -> str:
        existing = {p.get('petId') for p in pets}
        stamp = DateTimeUtils.to_timestamp_ms()
        while f"pet_{stamp}" in existing:
            stamp += 1
        return f"pet_{stamp}"

    def create(self, pet: Pet) -> Pet:
        with self.kv.lock:
            pets = self._load_all()
            if not pet.pet_id:
                pet.pet_id = self._new_pet_id(pets)
            elif any(p.get('petId') == pet.pet_id for p in pets):
                raise PetAlreadyExistsError(f"이미 존재하는 petId입니다: {pet.pet_id}")

            pet.created_at = pet.updated_at = DateTimeUtils.now_iso()
            pet.version = 1
            pets.append(pet.to_dict())
            self.kv.set_json(PETS_KEY, pets)

        logging.info(f"Pet created in local store: {pet.pet_id} (owner: {pet.owner_id})")
        return pet

    def get_by_id(self, pet_id: str) -> Optional[Pet]:
        for data in self._load_all():
            if data.get('petId') == pet_id:
                return Pet.from_dict(data)
        return None

    def list_by_owner(self, owner_id: str) -> List[Pet]:
        return [Pet.from_dict(data) for data in self._load_all() if data.get('ownerId') == owner_id]

    def update(self, pet_id: str, partial: Dict[str, Any],
               expected_version: Optional[int] = None) -> Pet:
        with self.kv.lock:
            pets = self._load_all()
            index = next((i for i, p in enumerate(pets) if p.get('petId') == pet_id), None)
            if index is None:
                raise NotFoundError()

            current = pets[index]
            if expected_version is not None and current.get('version', 1) != expected_version:
                raise VersionConflictError()

            merged = apply_partial(current, partial)
            merged['updatedAt'] = DateTimeUtils.later_than(current.get('updatedAt'))
            merged['version'] = current.get('version', 1) + 1
            pets[index] = merged
            self.kv.set_json(PETS_KEY, pets)

        logging.info(f"Pet updated in local store: {pet_id} with fields: {list(partial.keys())}")
        return Pet.from_dict(merged)

    def delete(self, pet_id: str) -> bool:
        with self.kv.lock:
            pets = self._load_all()
            remaining = [p for p in pets if p.get('petId') != pet_id]
            if len(remaining) == len(pets):
                return False
            self.kv.set_json(PETS_KEY, remaining)

        logging.info(f"Pet deleted from local store: {pet_id}")
        return True
