import io

import pytest

from schoolsite import create_app
from schoolsite.config import TestConfig
from schoolsite.errors import BlobNotFound
from schoolsite.services.storage import BlobStorage

ADMIN_USERNAME = 'admin'
ADMIN_PASSWORD = 'password123'
SESSION_COOKIE = 'school_site_sid'


class RecordingStorage(BlobStorage):
    """In-memory blob store that can be told to fail."""

    def __init__(self):
        self.objects = {}
        self.delete_error = None

    def put(self, pathname, data, content_type):
        url = f'https://blob.test/{pathname}'
        self.objects[url] = data
        return url

    def delete(self, url):
        if self.delete_error is not None:
            raise self.delete_error
        if url not in self.objects:
            raise BlobNotFound(f'{url} does not exist.')
        del self.objects[url]


def make_config(tmp_path, **overrides):
    attrs = {'UPLOAD_FOLDER': str(tmp_path / 'uploads')}
    attrs.update(overrides)
    return type('LocalTestConfig', (TestConfig,), attrs)


@pytest.fixture()
def storage():
    return RecordingStorage()


@pytest.fixture()
def app(tmp_path, storage):
    return create_app(make_config(tmp_path), storage=storage)


@pytest.fixture()
def client(app):
    return app.test_client()


def login(client, username=ADMIN_USERNAME, password=ADMIN_PASSWORD):
    return client.post('/login', data={'username': username, 'password': password})


@pytest.fixture()
def auth_client(client):
    r = login(client)
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/admin')
    return client


def session_cookie(response):
    """Value of the session cookie set by ``response``, if any."""
    for header in response.headers.getlist('Set-Cookie'):
        if header.startswith(SESSION_COOKIE + '='):
            return header.split(';', 1)[0].split('=', 1)[1]
    return None


def image_file(name='photo.png', data=b'\x89PNG fake image bytes'):
    return (io.BytesIO(data), name)
