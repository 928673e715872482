# conftest.py
"""
공용 pytest 픽스처.
모든 테스트는 로컬 백엔드(임시 JSON 파일)를 사용하며 네트워크에 접근하지 않습니다.
"""

import io
import pytest
from PIL import Image

from petpass import create_app
from petpass.models.user import User
from petpass.services.session_service import SessionContext
from petpass.stores.kv_store import LocalKeyValueStore
from petpass.stores.local_store import LocalPetStore


def make_image_bytes(width: int = 1600, height: int = 1200, color=(200, 120, 40), fmt: str = 'PNG') -> bytes:
    buffer = io.BytesIO()
    Image.new('RGB', (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def image_bytes():
    """make_image_bytes(width, height, ...) 팩토리."""
    return make_image_bytes


@pytest.fixture
def kv_store(tmp_path):
    return LocalKeyValueStore(path=str(tmp_path / 'petpass_local.json'))


@pytest.fixture
def pet_store(kv_store):
    return LocalPetStore(kv_store)


@pytest.fixture
def owner_session():
    return SessionContext.for_user(User(uid='u1', email='owner@example.com', display_name='owner'))


@pytest.fixture
def visitor_session():
    return SessionContext.for_user(User(uid='u2', email='visitor@example.com'))


@pytest.fixture
def pet_payload():
    """등록 API에 보내는 최소한의 유효한 본문."""
    return {
        "owner": {"name": "Kim", "email": "kim@example.com", "phone": "010-1234-5678", "address": "Seoul"},
        "profile": {
            "name": "Fido",
            "species": "Dog",
            "breed": "Lab",
            "dob": "2020-01-01",
            "color": "Brown",
            "weight": "20kg"
        },
        "health": {"vet": "Dr. Lee", "allergies": "chicken, beef,,chicken , "},
        "fun": {"bio": "x" * 200, "nicknames": "Fifi, Doggo"},
        "privacy": "public"
    }


@pytest.fixture
def app(tmp_path):
    app = create_app('testing', overrides={
        'LOCAL_STORAGE_PATH': str(tmp_path / 'petpass_app.json'),
        'PUBLIC_BASE_URL': 'https://petpass.test'
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signup(client):
    """이메일로 가입하고 (Authorization 헤더, 사용자 정보)를 반환하는 헬퍼."""
    def _signup(email: str = 'owner@example.com', password: str = 'secret123'):
        response = client.post('/api/auth/signup', json={"email": email, "password": password})
        assert response.status_code == 201, response.get_json()
        body = response.get_json()
        return {"Authorization": f"Bearer {body['access_token']}"}, body['user']
    return _signup
