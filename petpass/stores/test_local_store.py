# petpass/stores/test_local_store.py
"""로컬(데모) 반려동물 저장소 테스트"""

import pytest

from petpass.core.exceptions import NotFoundError, PetAlreadyExistsError, QuotaExceededError, VersionConflictError
from petpass.models.pet import Pet, Owner, Profile, PrivacySetting
from petpass.stores.kv_store import LocalKeyValueStore
from petpass.stores.local_store import LocalPetStore, PETS_KEY
from petpass.utils.datetime_utils import parse_iso


def _new_pet(owner_id='u1', name='Fido') -> Pet:
    return Pet(
        owner_id=owner_id,
        owner=Owner(name='Kim', email='kim@example.com'),
        profile=Profile(name=name, species='Dog', breed='Lab', dob='2020-01-01', color='Brown', weight='20kg'),
    )


def test_create_then_get(pet_store):
    created = pet_store.create(_new_pet())
    assert created.pet_id.startswith('pet_')
    assert created.created_at == created.updated_at
    assert created.version == 1

    loaded = pet_store.get_by_id(created.pet_id)
    assert loaded.profile.name == 'Fido'
    assert loaded.owner.email == 'kim@example.com'
    assert loaded.created_at == loaded.updated_at


def test_pet_ids_are_unique(pet_store):
    ids = {pet_store.create(_new_pet()).pet_id for _ in range(5)}
    assert len(ids) == 5


def test_create_with_duplicate_id_is_rejected(pet_store):
    pet = pet_store.create(_new_pet())
    with pytest.raises(PetAlreadyExistsError):
        pet_store.create(Pet(pet_id=pet.pet_id, owner_id='u1'))


def test_records_are_stored_under_single_key(pet_store, kv_store):
    pet_store.create(_new_pet())
    pet_store.create(_new_pet(name='Rex'))
    stored = kv_store.get_json(PETS_KEY)
    assert [p['profile']['name'] for p in stored] == ['Fido', 'Rex']


def test_list_by_owner(pet_store):
    pet_store.create(_new_pet('u1', 'Fido'))
    pet_store.create(_new_pet('u2', 'Rex'))
    pet_store.create(_new_pet('u1', 'Coco'))

    names = [p.profile.name for p in pet_store.list_by_owner('u1')]
    assert names == ['Fido', 'Coco']
    assert pet_store.list_by_owner('nobody') == []


def test_update_merges_and_refreshes_timestamp(pet_store):
    created = pet_store.create(_new_pet())
    updated = pet_store.update(created.pet_id, {'privacy': 'private', 'ownerId': 'thief'})

    assert updated.privacy is PrivacySetting.PRIVATE
    assert updated.owner_id == 'u1'
    assert updated.profile.name == 'Fido'
    assert updated.created_at == created.created_at
    assert parse_iso(updated.updated_at) > parse_iso(created.updated_at)
    assert updated.version == 2

    again = pet_store.update(created.pet_id, {'fun': {'bio': 'hello'}})
    assert parse_iso(again.updated_at) > parse_iso(updated.updated_at)
    assert again.privacy is PrivacySetting.PRIVATE
    assert again.fun.bio == 'hello'


def test_update_missing_pet_raises(pet_store):
    with pytest.raises(NotFoundError):
        pet_store.update('pet_missing', {'privacy': 'private'})


def test_update_with_stale_version_raises(pet_store):
    created = pet_store.create(_new_pet())
    pet_store.update(created.pet_id, {'privacy': 'private'}, expected_version=1)
    with pytest.raises(VersionConflictError):
        pet_store.update(created.pet_id, {'privacy': 'public'}, expected_version=1)
    assert pet_store.get_by_id(created.pet_id).privacy is PrivacySetting.PRIVATE


def test_delete(pet_store):
    created = pet_store.create(_new_pet())
    assert pet_store.delete(created.pet_id) is True
    assert pet_store.get_by_id(created.pet_id) is None
    assert pet_store.list_by_owner('u1') == []
    assert pet_store.delete(created.pet_id) is False


def test_quota_exceeded_on_create_keeps_existing_records(tmp_path):
    store = LocalPetStore(LocalKeyValueStore(path=str(tmp_path / 'kv.json'), quota_bytes=2000))
    first = store.create(_new_pet())

    big = _new_pet(name='Big')
    big.profile.photos = ['data:image/jpeg;base64,' + 'A' * 5000]
    with pytest.raises(QuotaExceededError):
        store.create(big)

    assert [p.pet_id for p in store.list_by_owner('u1')] == [first.pet_id]
