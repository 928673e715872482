# petpass/models/pet.py
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Optional, List, Dict, Any, ClassVar
import logging

# 부분 업데이트로 교체할 수 있는 최상위 필드
MUTABLE_FIELDS = ('owner', 'profile', 'health', 'fun', 'travel', 'privacy')


class PrivacySetting(Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    INVITE_ONLY = "invite-only"


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


class _Record:
    """
    저장 형식(camelCase JSON)과 dataclass 사이의 변환을 담당하는 공통 믹스인.
    - _nested: 하위 레코드 필드 (dict <-> dataclass)
    - _nested_lists: 하위 레코드 리스트 필드
    값이 None인 선택 필드는 저장하지 않습니다.
    """
    _nested: ClassVar[Dict[str, type]] = {}
    _nested_lists: ClassVar[Dict[str, type]] = {}

    def to_dict(self) -> Dict[str, Any]:
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, _Record):
                value = value.to_dict()
            elif isinstance(value, list):
                value = [item.to_dict() if isinstance(item, _Record) else item for item in value]
            result[_camel(f.name)] = value
        return result

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]):
        """저장된 딕셔너리로부터 인스턴스를 생성합니다. 알 수 없는 키는 무시합니다."""
        data = data or {}
        kwargs = {}
        for f in fields(cls):
            key = _camel(f.name)
            if key not in data:
                continue
            value = data[key]
            if f.name in cls._nested:
                value = cls._nested[f.name].from_dict(value)
            elif f.name in cls._nested_lists:
                value = [cls._nested_lists[f.name].from_dict(item) for item in (value or [])]
            elif f.default_factory is list and value is None:
                value = []
            kwargs[f.name] = value
        return cls(**kwargs)


@dataclass
class Owner(_Record):
    name: str = ''
    email: str = ''
    phone: Optional[str] = None
    address: Optional[str] = None
    photo_url: Optional[str] = None


@dataclass
class Profile(_Record):
    name: str = ''
    species: str = ''
    breed: str = ''
    dob: str = ''
    color: str = ''
    weight: str = ''
    microchip: Optional[str] = None
    photo_url: Optional[str] = None
    photos: List[str] = field(default_factory=list)  # 최대 3장
    qr_url: Optional[str] = None

    def sync_photo_url(self) -> None:
        """대표 사진(photoUrl)은 photos의 첫 번째 항목, 없으면 빈 문자열."""
        self.photo_url = self.photos[0] if self.photos else ''


@dataclass
class Vaccination(_Record):
    name: str = ''
    date: str = ''
    expiry: str = ''
    certificate: Optional[str] = None


@dataclass
class Health(_Record):
    _nested_lists: ClassVar[Dict[str, type]] = {'vaccinations': Vaccination}

    vet: str = ''
    clinic: str = ''
    contact: str = ''
    allergies: List[str] = field(default_factory=list)
    medications: List[str] = field(default_factory=list)
    vaccinations: List[Vaccination] = field(default_factory=list)
    chronic_issues: Optional[List[str]] = None
    food_brand: Optional[str] = None
    treat_brand: Optional[str] = None
    vitamin_brand: Optional[str] = None
    feeding_schedule: Optional[str] = None
    health_issues: Optional[List[str]] = None
    vaccination_images: Optional[List[str]] = None
    prescriptions: Optional[List[str]] = None
    certifications: Optional[List[str]] = None


@dataclass
class Favorites(_Record):
    food: Optional[str] = None
    toy: Optional[str] = None


@dataclass
class Fun(_Record):
    _nested: ClassVar[Dict[str, type]] = {'favorites': Favorites}

    nicknames: List[str] = field(default_factory=list)
    bio: str = ''
    favorites: Favorites = field(default_factory=Favorites)
    quirks: Optional[str] = None
    instagram: Optional[str] = None
    tiktok: Optional[str] = None


@dataclass
class Travel(_Record):
    passport_number: Optional[str] = None
    country_of_origin: str = ''
    travel_history: List[str] = field(default_factory=list)
    rabies_certificate: Optional[str] = None
    health_certificate: Optional[str] = None


@dataclass
class Pet(_Record):
    """
    'pets' 컬렉션(로컬 백엔드에서는 'demo_pets' 목록)의 문서 구조.
    반려동물 여권 한 건의 전체 정보를 담는 루트 애그리거트입니다.
    """
    _nested: ClassVar[Dict[str, type]] = {
        'owner': Owner, 'profile': Profile, 'health': Health, 'fun': Fun, 'travel': Travel
    }

    pet_id: str = ''
    owner_id: str = ''
    owner: Owner = field(default_factory=Owner)
    profile: Profile = field(default_factory=Profile)
    health: Health = field(default_factory=Health)
    fun: Fun = field(default_factory=Fun)
    travel: Travel = field(default_factory=Travel)
    privacy: PrivacySetting = PrivacySetting.PUBLIC
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    version: int = 1

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Pet":
        """
        저장소에서 읽은 딕셔너리로부터 Pet 인스턴스를 생성합니다.
        문자열로 저장된 privacy 값을 PrivacySetting Enum으로 변환합니다.
        """
        processed_data = dict(data or {})

        privacy = processed_data.get('privacy')
        if isinstance(privacy, str):
            try:
                processed_data['privacy'] = PrivacySetting(privacy)
            except ValueError:
                logging.warning(f"Invalid privacy value '{privacy}' for pet {processed_data.get('petId')}. Defaulting to private.")
                processed_data['privacy'] = PrivacySetting.PRIVATE
        elif privacy is None:
            processed_data.pop('privacy', None)

        return super().from_dict(processed_data)

    @property
    def is_public(self) -> bool:
        return self.privacy == PrivacySetting.PUBLIC


def apply_partial(record: Dict[str, Any], partial: Dict[str, Any]) -> Dict[str, Any]:
    """
    저장된 레코드에 부분 업데이트를 병합한 새 딕셔너리를 반환합니다.
    최상위는 얕은 병합이며, partial에 포함된 하위 객체는 통째로 교체됩니다.
    petId, ownerId, createdAt 등 수정 불가 필드는 partial에 있어도 무시합니다.
    """
    merged = dict(record)
    merged.update(mutable_fields_of(partial))
    return merged


def mutable_fields_of(partial: Dict[str, Any]) -> Dict[str, Any]:
    """partial에서 수정 가능한 최상위 필드만 골라냅니다."""
    return {key: value for key, value in partial.items() if key in MUTABLE_FIELDS}
