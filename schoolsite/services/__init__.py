"""
Services Package

The services an application instance runs with are built once in create_app
and kept on ``app.extensions``; views look them up with get_services().
"""

from flask import current_app

from schoolsite.services.carousel import CarouselStore
from schoolsite.services.contact import ContactDispatcher
from schoolsite.services.settings import SettingsStore
from schoolsite.services.storage import storage_from_config

EXTENSION_KEY = 'site_services'


class SiteServices:
    """Everything a request handler needs, built once per app."""

    def __init__(self, settings, carousel, storage, contact):
        self.settings = settings
        self.carousel = carousel
        self.storage = storage
        self.contact = contact


def build_services(app, db, mail, storage=None):
    if storage is None:
        storage = storage_from_config(app.config)
    settings = SettingsStore(db)
    return SiteServices(
        settings=settings,
        carousel=CarouselStore(db, storage, app.config['ALLOWED_EXTENSIONS']),
        storage=storage,
        contact=ContactDispatcher(settings, mail, app.config),
    )


def get_services():
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    'SiteServices',
    'build_services',
    'get_services',
    'SettingsStore',
    'CarouselStore',
    'ContactDispatcher',
]
