"""
Blob Storage Service

Uploaded images go either to Vercel Blob (over its HTTP API) or to a folder
on local disk. Both backends return a public URL from ``put`` and raise
BlobNotFound from ``delete`` when the object is already gone.
"""

import logging
import os
import secrets
import time

import requests
from werkzeug.utils import secure_filename

from schoolsite.errors import BlobNotFound, BlobStorageError, ValidationError

logger = logging.getLogger(__name__)

BLOB_PREFIX = 'school_assets/images'
BLOB_API_VERSION = '7'


def generate_blob_filename(original_name):
    """Build a collision-resistant object path from an uploaded file name."""
    base, ext = os.path.splitext(original_name or '')
    base = secure_filename(base)[:50] or 'image'
    ext = secure_filename(ext).lower()
    if ext and not ext.startswith('.'):
        ext = '.' + ext
    timestamp = int(time.time() * 1000)
    token = secrets.token_hex(3)
    return f'{BLOB_PREFIX}/{base}-{timestamp}-{token}{ext}'


def allowed_file(filename, allowed_extensions):
    return '.' in filename and filename.rsplit('.', 1)[-1].lower() in allowed_extensions


def store_upload(storage, file_storage, allowed_extensions):
    """Validate a werkzeug FileStorage and push it to ``storage``.

    Returns the public URL of the stored object.
    """
    filename = file_storage.filename or ''
    if not allowed_file(filename, allowed_extensions):
        raise ValidationError('Unsupported file type. Please upload an image.')

    pathname = generate_blob_filename(filename)
    data = file_storage.read()
    return storage.put(pathname, data, file_storage.mimetype or 'application/octet-stream')


class BlobStorage:
    """Interface shared by the storage backends."""

    def put(self, pathname, data, content_type):
        raise NotImplementedError

    def delete(self, url):
        raise NotImplementedError


class LocalDiskStorage(BlobStorage):
    """Store files under ``root`` and serve them from ``url_prefix``."""

    def __init__(self, root, url_prefix='/uploads'):
        self.root = os.path.abspath(root)
        self.url_prefix = url_prefix.rstrip('/')

    def put(self, pathname, data, content_type):
        path = self._path_for(pathname)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, 'wb') as fh:
                fh.write(data)
        except OSError as exc:
            logger.exception('Could not write upload %s', pathname)
            raise BlobStorageError('Failed to store file.') from exc

        url = f'{self.url_prefix}/{pathname}'
        logger.info('Stored upload on disk: %s', url)
        return url

    def delete(self, url):
        if not url.startswith(self.url_prefix + '/'):
            raise BlobNotFound(f'{url} is not a local upload.')

        path = self._path_for(url[len(self.url_prefix) + 1:])
        if not os.path.isfile(path):
            raise BlobNotFound(f'{url} does not exist.')
        try:
            os.remove(path)
        except FileNotFoundError as exc:
            raise BlobNotFound(f'{url} does not exist.') from exc
        except OSError as exc:
            logger.exception('Could not delete upload %s', url)
            raise BlobStorageError('Failed to delete file.') from exc
        logger.info('Deleted upload from disk: %s', url)

    def _path_for(self, pathname):
        path = os.path.abspath(os.path.join(self.root, pathname))
        if os.path.commonpath([self.root, path]) != self.root:
            raise BlobStorageError('Refusing to touch a path outside the upload folder.')
        return path


class VercelBlobStorage(BlobStorage):
    """Vercel Blob client built on requests."""

    def __init__(self, token, api_url='https://blob.vercel-storage.com', timeout=15):
        self.token = token
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout

    def _headers(self, **extra):
        headers = {
            'authorization': f'Bearer {self.token}',
            'x-api-version': BLOB_API_VERSION,
        }
        headers.update(extra)
        return headers

    def put(self, pathname, data, content_type):
        try:
            resp = requests.put(
                f'{self.api_url}/{pathname}',
                data=data,
                headers=self._headers(**{'x-content-type': content_type}),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            logger.exception('Vercel Blob upload failed for %s', pathname)
            raise BlobStorageError('Failed to upload file.') from exc

        if resp.status_code >= 300:
            logger.error('Vercel Blob upload error %s for %s: %s', resp.status_code, pathname, resp.text)
            raise BlobStorageError(f'Blob store error {resp.status_code}')

        try:
            url = resp.json().get('url')
        except ValueError as exc:
            logger.error('Vercel Blob upload for %s returned a non-JSON body: %s', pathname, resp.text)
            raise BlobStorageError('Blob store returned an unreadable response.') from exc
        if not url:
            raise BlobStorageError('Blob store did not return a URL.')
        logger.info('Uploaded to Vercel Blob: %s', url)
        return url

    def head(self, url):
        try:
            resp = requests.get(
                self.api_url,
                params={'url': url},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise BlobStorageError('Failed to reach blob store.') from exc

        if resp.status_code == 404:
            raise BlobNotFound(f'{url} does not exist.')
        if resp.status_code >= 300:
            raise BlobStorageError(f'Blob store error {resp.status_code}')
        return resp.json()

    def delete(self, url):
        self.head(url)
        try:
            resp = requests.post(
                f'{self.api_url}/delete',
                json={'urls': [url]},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            logger.exception('Vercel Blob delete failed for %s', url)
            raise BlobStorageError('Failed to delete file.') from exc

        if resp.status_code == 404:
            raise BlobNotFound(f'{url} does not exist.')
        if resp.status_code >= 300:
            logger.error('Vercel Blob delete error %s for %s: %s', resp.status_code, url, resp.text)
            raise BlobStorageError(f'Blob store error {resp.status_code}')
        logger.info('Deleted from Vercel Blob: %s', url)


def storage_from_config(config):
    """Pick the storage backend described by the app config."""
    backend = config.get('STORAGE_BACKEND') or ''
    token = config.get('BLOB_READ_WRITE_TOKEN')

    if backend == 'vercel' or (not backend and token):
        if not token:
            logger.warning('STORAGE_BACKEND=vercel but BLOB_READ_WRITE_TOKEN is not set')
        return VercelBlobStorage(token, config.get('BLOB_API_URL'), config.get('BLOB_TIMEOUT', 15))

    return LocalDiskStorage(config['UPLOAD_FOLDER'], config.get('UPLOAD_URL_PREFIX', '/uploads'))
