"""
Carousel Service

Ordered banner images. Each record points at an object in blob storage, so
adding and removing images touches both the database and the storage backend.
The two are not atomic: a failed insert leaves the uploaded blob behind unless
the best-effort cleanup succeeds.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from schoolsite.errors import BlobNotFound, BlobStorageError, NotFound, StorageError
from schoolsite.models import CarouselImage
from schoolsite.services.storage import store_upload

logger = logging.getLogger(__name__)

DEFAULT_ALT_TEXT = 'Carousel Image'


class CarouselStore:
    """CRUD over carousel_images plus the backing blobs."""

    def __init__(self, db, storage, allowed_extensions):
        self.db = db
        self.storage = storage
        self.allowed_extensions = allowed_extensions

    def list(self):
        try:
            return self.db.session.execute(
                self.db.select(CarouselImage).order_by(
                    CarouselImage.display_order.asc(), CarouselImage.id.asc()
                )
            ).scalars().all()
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            logger.exception('Failed to list carousel images')
            raise StorageError('Failed to retrieve carousel images.') from exc

    def next_display_order(self):
        current = self.db.session.execute(
            self.db.select(self.db.func.coalesce(self.db.func.max(CarouselImage.display_order), 0))
        ).scalar()
        return current + 1

    def add(self, file_storage, link_url=None, alt_text=None):
        """Upload ``file_storage`` and append a record for it."""
        image_url = store_upload(self.storage, file_storage, self.allowed_extensions)
        logger.info('Carousel image uploaded: %s', image_url)

        session = self.db.session
        try:
            image = CarouselImage(
                image_url=image_url,
                link_url=link_url or None,
                alt_text=alt_text or DEFAULT_ALT_TEXT,
                file_name=file_storage.filename,
                display_order=self.next_display_order(),
            )
            session.add(image)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception('Saving carousel record failed, removing uploaded blob %s', image_url)
            self._discard_blob(image_url)
            raise StorageError('Failed to add carousel image.') from exc

        return image

    def remove(self, image_id):
        """Delete the record, then its blob. A blob error keeps the record."""
        session = self.db.session
        image = session.get(CarouselImage, image_id)
        if image is None:
            raise NotFound('Image not found in database.')

        image_url = image.image_url
        try:
            session.delete(image)
            session.flush()

            if image_url:
                try:
                    self.storage.delete(image_url)
                except BlobNotFound:
                    logger.warning('Blob not found (already deleted?): %s', image_url)

            session.commit()
        except BlobStorageError as exc:
            session.rollback()
            logger.error('Blob deletion failed for image %s, record kept: %s', image_id, exc)
            raise StorageError('Failed to process image deletion.') from exc
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception('Deleting carousel image %s failed', image_id)
            raise StorageError('Failed to process image deletion.') from exc

        logger.info('Carousel image %s record and blob deleted', image_id)

    def _discard_blob(self, image_url):
        try:
            self.storage.delete(image_url)
        except BlobStorageError as exc:
            logger.warning('Could not remove orphaned blob %s: %s', image_url, exc)
