from datetime import timedelta

import pytest
from flask_login import user_unauthorized

from schoolsite import _ensure_default_data
from schoolsite.extensions import db
from schoolsite.models import CarouselImage, SessionRecord, Setting, User
from schoolsite.models.session import utcnow

from conftest import SESSION_COOKIE, image_file, login, session_cookie


def test_seed_admin_created_once(app):
    with app.app_context():
        _ensure_default_data(app)
        users = db.session.execute(db.select(User).filter_by(username='admin')).scalars().all()
        assert len(users) == 1
        assert users[0].password_hash != 'password123'
        assert users[0].check_password('password123')


def test_login_success_sets_server_side_session(app, client):
    r = login(client)
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/admin')

    sid = session_cookie(r)
    assert sid
    cookie_header = [h for h in r.headers.getlist('Set-Cookie') if h.startswith(SESSION_COOKIE)][0]
    assert 'HttpOnly' in cookie_header

    with app.app_context():
        record = db.session.execute(db.select(SessionRecord).filter_by(sid=sid)).scalar_one()
        assert record.expires_at - record.created_at == timedelta(hours=24)

    r = client.get('/api/session')
    assert r.get_json() == {'authenticated': True, 'username': 'admin'}
    assert client.get('/admin').status_code == 200


def test_login_with_bad_password_redirects_with_error(client):
    r = login(client, password='wrong')
    assert r.status_code == 302
    assert '/login?error=Invalid' in r.headers['Location']
    assert session_cookie(r) is None

    r = client.get('/api/session')
    assert r.get_json()['authenticated'] is False


def test_login_with_unknown_user_redirects_with_error(client):
    r = login(client, username='nobody')
    assert '/login?error=Invalid' in r.headers['Location']


def test_login_requires_both_fields(client):
    r = client.post('/login', data={'username': 'admin'})
    assert r.status_code == 302
    assert 'error=Username' in r.headers['Location']


@pytest.mark.parametrize('payload', [['admin', 'password123'], 'admin', 3])
def test_login_with_non_object_json_redirects_with_error(client, payload):
    r = client.post('/login', json=payload)
    assert r.status_code == 302
    assert 'error=Username' in r.headers['Location']
    assert session_cookie(r) is None


def test_login_accepts_json_body(client):
    r = client.post('/login', json={'username': 'admin', 'password': 'password123'})
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/admin')


def test_login_regenerates_session_id(app, client):
    first = session_cookie(login(client))
    second = session_cookie(login(client))
    assert first and second and first != second

    with app.app_context():
        sids = db.session.execute(db.select(SessionRecord.sid)).scalars().all()
        assert first not in sids
        assert second in sids


def test_logout_is_idempotent(app, auth_client):
    r = auth_client.post('/api/logout')
    assert r.status_code == 200
    assert r.get_json()['message'] == 'Logout successful'

    r = auth_client.post('/api/logout')
    assert r.status_code == 200
    assert r.get_json()['message'] == 'No active session to log out from.'

    assert auth_client.get('/api/session').get_json()['authenticated'] is False
    with app.app_context():
        assert db.session.execute(db.select(db.func.count(SessionRecord.id))).scalar() == 0


def test_logout_without_session(client):
    r = client.post('/api/logout')
    assert r.status_code == 200


def test_admin_page_redirects_to_login(client):
    r = client.get('/admin')
    assert r.status_code == 302
    assert '/login?unauthorized=true' in r.headers['Location']


def test_guard_goes_through_login_manager(app, client):
    seen = []
    with user_unauthorized.connected_to(lambda sender, **kw: seen.append(sender), app):
        assert client.post('/api/settings', json={'settings': {}}).status_code == 401
        assert client.get('/admin').status_code == 302
    assert len(seen) == 2


def seed_carousel_image(app, storage):
    with app.app_context():
        url = storage.put('school_assets/images/seed.png', b'seed', 'image/png')
        image = CarouselImage(image_url=url, alt_text='Seed', file_name='seed.png', display_order=1)
        db.session.add(image)
        db.session.commit()
        return image.id


@pytest.mark.parametrize('method,path,field', [
    ('post', '/api/settings', None),
    ('post', '/api/carousel', 'carouselImage'),
    ('delete', '/api/carousel/{image_id}', None),
    ('post', '/api/upload-logo', 'logo'),
    ('post', '/api/upload-about-image', 'aboutImage'),
    ('post', '/api/upload-academics-image', 'academicsImage'),
])
def test_mutating_api_requires_session(app, client, storage, method, path, field):
    image_id = seed_carousel_image(app, storage)
    stored_before = dict(storage.objects)

    if method == 'delete':
        r = client.delete(path.format(image_id=image_id))
    elif field:
        r = client.post(path, data={field: image_file(), 'altText': 'x'}, content_type='multipart/form-data')
    else:
        r = client.post(path, json={'settings': {'schoolName': 'Hacked'}})

    assert r.status_code == 401
    body = r.get_json()
    assert body['redirectTo'] == '/login?unauthorized=true'
    assert 'Unauthorized' in body['error']

    assert storage.objects == stored_before
    with app.app_context():
        assert db.session.execute(db.select(db.func.count(Setting.id))).scalar() == 0
        images = db.session.execute(db.select(CarouselImage)).scalars().all()
        assert [i.id for i in images] == [image_id]


def test_expired_session_is_rejected(app, auth_client):
    with app.app_context():
        record = db.session.execute(db.select(SessionRecord)).scalar_one()
        record.expires_at = utcnow() - timedelta(seconds=1)
        db.session.commit()

    assert auth_client.get('/api/session').get_json()['authenticated'] is False
    r = auth_client.post('/api/settings', json={'settings': {'schoolName': 'Late'}})
    assert r.status_code == 401


def test_session_expiry_is_not_extended_by_use(app, auth_client):
    with app.app_context():
        before = db.session.execute(db.select(SessionRecord.expires_at)).scalar_one()

    auth_client.post('/api/settings', json={'settings': {'schoolName': 'Greenfield'}})
    auth_client.get('/api/session')

    with app.app_context():
        after = db.session.execute(db.select(SessionRecord.expires_at)).scalar_one()
    assert after == before
