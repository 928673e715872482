# petpass/api/pets/schemas.py
from marshmallow import Schema, fields, validate, post_load, ValidationError, EXCLUDE

from petpass.models.pet import (
    Owner, Profile, Vaccination, Health, Favorites, Fun, Travel, PrivacySetting
)
from petpass.utils.datetime_utils import DateTimeUtils
from petpass.utils.text_utils import normalize_comma_list

MAX_PET_PHOTOS = 3
DOCUMENT_CATEGORIES = ('vaccinations', 'prescriptions', 'certifications')


def validate_date_string(value):
    """'YYYY-MM-DD' 형식으로 해석 가능한 날짜인지 검증합니다."""
    try:
        DateTimeUtils.parse_date_string(value)
    except ValueError:
        raise ValidationError(f"'{value}'은(는) 올바른 날짜 형식(YYYY-MM-DD)이 아닙니다.")


class CommaSeparatedList(fields.Field):
    """
    콤마로 구분된 문자열 또는 문자열 리스트를 받아 정규화된 리스트로 변환하는 필드.
    예: "a, b,,c , " -> ["a", "b", "c"]
    """

    def _deserialize(self, value, attr, data, **kwargs):
        if not isinstance(value, (str, list)):
            raise ValidationError("콤마로 구분된 문자열 또는 문자열 목록이어야 합니다.")
        return normalize_comma_list(value)

    def _serialize(self, value, attr, obj, **kwargs):
        return list(value or [])


def _required(field_name: str) -> dict:
    return {"required": f"{field_name}은(는) 필수 항목입니다."}


class OwnerSchema(Schema):
    name = fields.Str(required=True, validate=validate.Length(min=1, max=100), error_messages=_required("보호자 이름"))
    email = fields.Email(required=True, error_messages=_required("보호자 이메일"))
    phone = fields.Str(allow_none=True)
    address = fields.Str(allow_none=True)
    photo_url = fields.Str(data_key="photoUrl", allow_none=True)

    @post_load
    def make_owner(self, data, **kwargs):
        return Owner(**data)


class ProfileSchema(Schema):
    name = fields.Str(required=True, validate=validate.Length(min=1, max=50), error_messages=_required("이름"))
    species = fields.Str(required=True, validate=validate.Length(min=1), error_messages=_required("종"))
    breed = fields.Str(required=True, validate=validate.Length(min=1), error_messages=_required("품종"))
    dob = fields.Str(required=True, validate=validate_date_string, error_messages=_required("생년월일"))
    color = fields.Str(required=True, validate=validate.Length(min=1), error_messages=_required("털색"))
    weight = fields.Str(required=True, validate=validate.Length(min=1), error_messages=_required("체중"))
    microchip = fields.Str(allow_none=True)
    photo_url = fields.Str(data_key="photoUrl", allow_none=True)
    photos = fields.List(fields.Str(), validate=validate.Length(max=MAX_PET_PHOTOS))
    qr_url = fields.Str(data_key="qrUrl", allow_none=True)

    @post_load
    def make_profile(self, data, **kwargs):
        return Profile(**data)


class VaccinationSchema(Schema):
    name = fields.Str(required=True, validate=validate.Length(min=1))
    date = fields.Str(load_default='')
    expiry = fields.Str(load_default='')
    certificate = fields.Str(allow_none=True)

    @post_load
    def make_vaccination(self, data, **kwargs):
        return Vaccination(**data)


class HealthSchema(Schema):
    vet = fields.Str(load_default='')
    clinic = fields.Str(load_default='')
    contact = fields.Str(load_default='')
    allergies = CommaSeparatedList(load_default=list)
    medications = CommaSeparatedList(load_default=list)
    vaccinations = fields.List(fields.Nested(VaccinationSchema), load_default=list)
    chronic_issues = CommaSeparatedList(data_key="chronicIssues", allow_none=True)
    food_brand = fields.Str(data_key="foodBrand", allow_none=True)
    treat_brand = fields.Str(data_key="treatBrand", allow_none=True)
    vitamin_brand = fields.Str(data_key="vitaminBrand", allow_none=True)
    feeding_schedule = fields.Str(data_key="feedingSchedule", allow_none=True)
    health_issues = CommaSeparatedList(data_key="healthIssues", allow_none=True)
    vaccination_images = fields.List(fields.Str(), data_key="vaccinationImages", allow_none=True)
    prescriptions = fields.List(fields.Str(), allow_none=True)
    certifications = fields.List(fields.Str(), allow_none=True)

    @post_load
    def make_health(self, data, **kwargs):
        return Health(**data)


class FavoritesSchema(Schema):
    food = fields.Str(allow_none=True)
    toy = fields.Str(allow_none=True)

    @post_load
    def make_favorites(self, data, **kwargs):
        return Favorites(**data)


class FunSchema(Schema):
    nicknames = CommaSeparatedList(load_default=list)
    bio = fields.Str(load_default='')
    favorites = fields.Nested(FavoritesSchema)
    quirks = fields.Str(allow_none=True)
    instagram = fields.Str(allow_none=True)
    tiktok = fields.Str(allow_none=True)

    @post_load
    def make_fun(self, data, **kwargs):
        return Fun(**data)


class TravelSchema(Schema):
    passport_number = fields.Str(data_key="passportNumber", allow_none=True)
    country_of_origin = fields.Str(data_key="countryOfOrigin", load_default='')
    travel_history = CommaSeparatedList(data_key="travelHistory", load_default=list)
    rabies_certificate = fields.Str(data_key="rabiesCertificate", allow_none=True)
    health_certificate = fields.Str(data_key="healthCertificate", allow_none=True)

    @post_load
    def make_travel(self, data, **kwargs):
        return Travel(**data)


class PetRegistrationSchema(Schema):
    """POST /api/pets/ 반려동물 최초 등록 요청 스키마. petId/ownerId 등 서버가 정하는 값은 무시합니다."""
    class Meta:
        unknown = EXCLUDE

    owner = fields.Nested(OwnerSchema, required=True, error_messages=_required("보호자 정보"))
    profile = fields.Nested(ProfileSchema, required=True, error_messages=_required("반려동물 프로필"))
    health = fields.Nested(HealthSchema)
    fun = fields.Nested(FunSchema)
    travel = fields.Nested(TravelSchema)
    privacy = fields.Str(load_default=PrivacySetting.PUBLIC.value,
                         validate=validate.OneOf([e.value for e in PrivacySetting]))


class PetUpdateSchema(Schema):
    """
    PATCH /api/pets/<pet_id> 부분 업데이트 스키마.
    포함된 섹션(owner, profile, ...)은 통째로 교체되므로 섹션 내부의 필수 항목은 등록 때와 같습니다.
    """
    class Meta:
        unknown = EXCLUDE

    owner = fields.Nested(OwnerSchema)
    profile = fields.Nested(ProfileSchema)
    health = fields.Nested(HealthSchema)
    fun = fields.Nested(FunSchema)
    travel = fields.Nested(TravelSchema)
    privacy = fields.Str(validate=validate.OneOf([e.value for e in PrivacySetting]))
    expected_version = fields.Int(data_key="expectedVersion", validate=validate.Range(min=1))


class DocumentCategorySchema(Schema):
    """POST /api/pets/<pet_id>/documents/<category> 경로 파라미터 검증."""
    category = fields.Str(required=True, validate=validate.OneOf(DOCUMENT_CATEGORIES))


class ImageUploadSchema(Schema):
    """JSON 본문으로 올리는 사진/서류 이미지 (data URL 문자열)."""
    image = fields.Str(metadata={"description": "대표 사진 한 장"})
    images = fields.List(fields.Str(), metadata={"description": "서류 이미지 목록"})

    class Meta:
        unknown = EXCLUDE


class ShareResponseSchema(Schema):
    pet_id = fields.Str(required=True)
    url = fields.Str(required=True)
    qr_code = fields.Str(required=True)
