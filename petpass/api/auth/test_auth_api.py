# petpass/api/auth/test_auth_api.py
"""인증 API 통합 테스트 (데모 인증 제공자)"""


def test_signup_signin_and_me(client, signup):
    headers, user = signup('kim@example.com', 'secret123')
    assert user['email'] == 'kim@example.com'
    assert user['displayName'] == 'kim'

    me = client.get('/api/auth/me', headers=headers)
    assert me.status_code == 200
    assert me.get_json()['user']['uid'] == user['uid']

    signin = client.post('/api/auth/signin', json={"email": "kim@example.com", "password": "secret123"})
    assert signin.status_code == 200
    assert signin.get_json()['user']['uid'] == user['uid']
    assert signin.get_json()['access_token']


def test_signin_with_wrong_password(client, signup):
    signup('kim@example.com', 'secret123')
    response = client.post('/api/auth/signin', json={"email": "kim@example.com", "password": "wrong-pass"})
    assert response.status_code == 401
    assert response.get_json()['error_code'] == 'AUTH_FAILED'


def test_signup_duplicate_and_invalid_input(client, signup):
    signup('kim@example.com', 'secret123')
    duplicate = client.post('/api/auth/signup', json={"email": "kim@example.com", "password": "secret123"})
    assert duplicate.status_code == 401

    invalid = client.post('/api/auth/signup', json={"email": "not-an-email", "password": "123"})
    assert invalid.status_code == 400
    assert set(invalid.get_json()['details']) == {'email', 'password'}


def test_social_login(client):
    google = client.post('/api/auth/social', json={"provider": "google"})
    assert google.status_code == 200
    assert google.get_json()['user']['email'] == 'demo@google.com'

    apple = client.post('/api/auth/social', json={"provider": "apple"})
    assert apple.get_json()['user']['email'] == 'demo@apple.com'

    unknown = client.post('/api/auth/social', json={"provider": "kakao"})
    assert unknown.status_code == 400


def test_signout_revokes_token(client, signup):
    headers, _ = signup()
    assert client.post('/api/auth/signout', headers=headers).status_code == 200

    # 무효화된 토큰으로는 더 이상 접근할 수 없음
    assert client.get('/api/auth/me', headers=headers).status_code == 401
    assert client.get('/api/pets/', headers=headers).status_code == 401


def test_me_requires_token(client):
    assert client.get('/api/auth/me').status_code == 401


def test_signout_is_recorded_in_local_storage(app, client, signup):
    headers, _ = signup()
    client.post('/api/auth/signout', headers=headers)

    kv = app.services['kv']
    assert len(kv.get_json('revoked_tokens')) == 1
    # 서버는 마지막 로그인 사용자를 따로 기억하지 않음
    assert kv.get_item('demo_user') is None
