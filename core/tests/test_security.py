import datetime as dt

import pytest
from django.utils import timezone
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken

pytestmark = pytest.mark.django_db


def _login(client, username, password='P@ssw0rd1', **extra):
    return client.post('/api/auth/login', {'username': username, 'password': password, **extra}, format='json')


def test_login_returns_token_and_jwt(admin_user):
    r = _login(APIClient(), 'admin1')
    assert r.status_code == 200
    assert r.data['token'] == Token.objects.get(user=admin_user).key
    assert r.data['jwt_access'] and r.data['jwt_refresh']
    assert r.data['role'] == 'hospital_admin'
    assert r.data['user']['hospitalId'] == admin_user.hospital_id


def test_login_failure_uses_error_envelope(admin_user):
    r = _login(APIClient(), 'admin1', password='wrong')
    assert r.status_code == 400
    assert r.data == {'ok': False, 'error': {'code': 'bad_request', 'message': '아이디 또는 비밀번호가 올바르지 않습니다'}}


def test_login_ignores_role_in_body(guardian):
    r = _login(APIClient(), 'guardian1', role='super')
    assert r.data['role'] == 'guardian'
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Token {r.data['token']}")
    assert client.get('/api/invoices/stats').status_code == 403


def test_bearer_and_token_headers_both_work(staff_user):
    login = _login(APIClient(), 'staff1')
    bearer = APIClient()
    bearer.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['jwt_access']}")
    assert bearer.get('/api/auth/me').data['data']['username'] == 'staff1'

    legacy = APIClient()
    legacy.credentials(HTTP_AUTHORIZATION=f"Token {login.data['token']}")
    me = legacy.get('/api/auth/me').data['data']
    assert me['memberships'][0]['position'] == 'STAFF'
    assert me['hospital']['id'] == staff_user.hospital_id


def test_expired_legacy_token_is_rejected_and_reissued(staff_user):
    first = _login(APIClient(), 'staff1').data['token']
    Token.objects.filter(key=first).update(created=timezone.now() - dt.timedelta(days=30))

    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Token {first}')
    r = client.get('/api/auth/me')
    assert r.status_code == 401
    assert not Token.objects.filter(key=first).exists()

    second = _login(APIClient(), 'staff1').data['token']
    assert second != first


def test_refresh_issues_new_access(staff_user):
    login = _login(APIClient(), 'staff1')
    r = APIClient().post('/api/auth/refresh', {'refresh': login.data['jwt_refresh']}, format='json')
    assert r.status_code == 200
    assert r.data['jwt_access']

    r = APIClient().post('/api/auth/refresh', {'refresh': 'not-a-token'}, format='json')
    assert r.status_code == 401
    assert r.data['ok'] is False


def test_logout_blacklists_refresh_and_revokes_token(staff_user):
    login = _login(APIClient(), 'staff1')
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['jwt_access']}")
    r = client.post('/api/auth/logout', {'refresh': login.data['jwt_refresh']}, format='json')
    assert r.data == {'ok': True, 'blacklisted': 1}
    assert BlacklistedToken.objects.count() == 1
    assert not Token.objects.filter(user=staff_user).exists()

    r = APIClient().post('/api/auth/refresh', {'refresh': login.data['jwt_refresh']}, format='json')
    assert r.status_code == 401


def test_logout_without_refresh_blacklists_all(staff_user):
    _login(APIClient(), 'staff1')
    login = _login(APIClient(), 'staff1')
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['jwt_access']}")
    assert client.post('/api/auth/logout', {}, format='json').data['blacklisted'] == 2


def test_anonymous_requests_are_rejected(db):
    client = APIClient()
    for url in ('/api/auth/me', '/api/invoices', '/api/inventory/products', '/api/animals'):
        r = client.get(url)
        assert r.status_code == 401, url
        assert r.data['ok'] is False


def test_healthz(client, db):
    r = client.get('/healthz')
    assert r.status_code == 200
    assert r.json() == {'ok': True, 'db': True}


def test_login_attempts_are_rate_limited(admin_user):
    client = APIClient()
    for _ in range(10):
        assert _login(client, 'admin1', password='wrong').status_code == 400
    r = _login(client, 'admin1')
    assert r.status_code == 429
    assert r.data['ok'] is False
    assert r.data['error']['code'] == 'throttled'
