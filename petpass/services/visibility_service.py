# petpass/services/visibility_service.py
"""
방문자에게 어떤 정보를 보여줄지 결정하는 공개 범위 정책.
입력(pet, viewer_is_owner)만으로 결과가 정해지는 순수 함수이며 I/O가 없습니다.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from petpass.models.pet import Pet, PrivacySetting
from petpass.utils.text_utils import truncate_text

BIO_PREVIEW_LENGTH = 150


class ViewKind(Enum):
    FULL = "full"
    PUBLIC = "public"
    DENIED = "denied"


@dataclass(frozen=True)
class RenderResult:
    kind: ViewKind
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_denied(self) -> bool:
        return self.kind == ViewKind.DENIED


def public_view(pet: Pet, bio_limit: int = BIO_PREVIEW_LENGTH) -> Dict[str, Any]:
    """
    공개 프로필에 노출할 고정된 부분 집합.
    건강 정보, 연락처(전화/주소/이메일), 여행 정보는 포함하지 않습니다.
    """
    profile = pet.profile
    return {
        "petId": pet.pet_id,
        "privacy": pet.privacy.value,
        "owner": {
            "name": pet.owner.name,
            "photoUrl": pet.owner.photo_url or '',
        },
        "profile": {
            "name": profile.name,
            "species": profile.species,
            "breed": profile.breed,
            "color": profile.color,
            "dob": profile.dob,
            "weight": profile.weight,
            "photoUrl": profile.photo_url or '',
        },
        "fun": {
            "bio": truncate_text(pet.fun.bio, bio_limit),
        },
    }


def render(pet: Pet, viewer_is_owner: bool, bio_limit: int = BIO_PREVIEW_LENGTH) -> RenderResult:
    """
    - 소유자: 항상 전체 정보
    - 방문자 + public: 공개 프로필
    - 방문자 + private / invite-only: 거부 (초대 링크 접근은 별도로 모델링하지 않음)
    """
    if viewer_is_owner:
        return RenderResult(ViewKind.FULL, pet.to_dict())
    if pet.privacy == PrivacySetting.PUBLIC:
        return RenderResult(ViewKind.PUBLIC, public_view(pet, bio_limit))
    return RenderResult(ViewKind.DENIED)
