# petpass/models/test_pet_model.py
"""Pet 레코드 <-> 저장 형식(camelCase JSON) 변환 및 부분 업데이트 병합 테스트"""

from petpass.models.pet import (
    Pet, Owner, Profile, Health, Vaccination, Fun, PrivacySetting, apply_partial, mutable_fields_of
)
from petpass.models.user import User


def _pet() -> Pet:
    return Pet(
        pet_id='pet_1',
        owner_id='u1',
        owner=Owner(name='Kim', email='kim@example.com'),
        profile=Profile(name='Fido', species='Dog', breed='Lab', dob='2020-01-01',
                        color='Brown', weight='20kg', photos=['https://img/1.jpg']),
        health=Health(allergies=['chicken'], vaccinations=[Vaccination(name='Rabies', date='2024-01-01')]),
        fun=Fun(bio='good boy'),
    )


def test_to_dict_uses_camel_case_and_skips_none():
    data = _pet().to_dict()
    assert data['petId'] == 'pet_1'
    assert data['ownerId'] == 'u1'
    assert data['privacy'] == 'public'
    assert data['profile']['photos'] == ['https://img/1.jpg']
    assert 'microchip' not in data['profile']
    assert 'passportNumber' not in data['travel']
    assert data['health']['vaccinations'] == [{'name': 'Rabies', 'date': '2024-01-01', 'expiry': ''}]
    assert data['fun']['favorites'] == {}


def test_from_dict_restores_nested_records():
    pet = Pet.from_dict(_pet().to_dict())
    assert pet == _pet()
    assert isinstance(pet.health.vaccinations[0], Vaccination)
    assert pet.privacy is PrivacySetting.PUBLIC


def test_from_dict_tolerates_missing_and_unknown_fields():
    pet = Pet.from_dict({'petId': 'p', 'ownerId': 'u', 'somethingElse': 1, 'profile': {'photos': None}})
    assert pet.profile.photos == []
    assert pet.health == Health()
    assert pet.privacy is PrivacySetting.PUBLIC


def test_from_dict_invalid_privacy_defaults_to_private():
    pet = Pet.from_dict({'petId': 'p', 'privacy': 'friends-only'})
    assert pet.privacy is PrivacySetting.PRIVATE
    assert not pet.is_public


def test_sync_photo_url():
    profile = Profile(photos=['a', 'b'])
    profile.sync_photo_url()
    assert profile.photo_url == 'a'

    profile.photos = []
    profile.sync_photo_url()
    assert profile.photo_url == ''


def test_apply_partial_replaces_sections_and_ignores_immutable_fields():
    record = _pet().to_dict()
    merged = apply_partial(record, {
        'profile': {'name': 'Rex'},
        'petId': 'hijacked',
        'ownerId': 'someone-else',
        'createdAt': '1999-01-01T00:00:00.000Z',
    })
    assert merged['profile'] == {'name': 'Rex'}
    assert merged['petId'] == 'pet_1'
    assert merged['ownerId'] == 'u1'
    assert merged['health'] == record['health']
    # 원본은 변경되지 않음
    assert record['profile']['name'] == 'Fido'


def test_mutable_fields_of():
    assert mutable_fields_of({'privacy': 'private', 'version': 9}) == {'privacy': 'private'}


def test_user_round_trip_keys():
    user = User(uid='u1', email='a@b.c', display_name='a', photo_url='https://p')
    assert user.to_dict() == {'uid': 'u1', 'email': 'a@b.c', 'displayName': 'a', 'photoURL': 'https://p'}
    assert User.from_dict(user.to_dict()) == user
