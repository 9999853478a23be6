"""
Settings Service

Key/value site settings. A fixed set of names holds JSON documents; those are
decoded on read and encoded on write.
"""

import json
import logging

from sqlalchemy.exc import SQLAlchemyError

from schoolsite.errors import StorageError
from schoolsite.models import Setting

logger = logging.getLogger(__name__)

# name -> factory for the value used when the stored JSON is empty or broken
JSON_SETTING_DEFAULTS = {
    'socialLinks': dict,
    'facilityCards': list,
    'heroGradient': dict,
    'aboutGradient': dict,
    'admissionsGradient': dict,
    'academicsGradient': dict,
    'facilitiesGradient': dict,
    'contactGradient': dict,
}


def decode_setting(name, raw):
    """Return the API representation of a stored setting value."""
    default = JSON_SETTING_DEFAULTS.get(name)
    if default is None:
        return raw
    if not raw:
        return default()
    try:
        return json.loads(raw)
    except ValueError as e:
        logger.warning("Could not parse setting '%s' as JSON. Value: %r. Error: %s", name, raw, e)
        return default()


def encode_setting(value):
    """Return the string stored for an incoming setting value."""
    if value is None:
        return ''
    if isinstance(value, str):
        return value
    return json.dumps(value)


class SettingsStore:
    """Read and bulk-write rows of the settings table."""

    def __init__(self, db):
        self.db = db

    def get_all(self):
        try:
            rows = self.db.session.execute(self.db.select(Setting)).scalars().all()
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            logger.exception('Failed to read settings')
            raise StorageError('Failed to retrieve settings from database.') from exc

        return {row.setting_name: decode_setting(row.setting_name, row.setting_value) for row in rows}

    def get_many(self, names):
        """Raw stored strings for ``names``; missing names are left out."""
        rows = self.db.session.execute(
            self.db.select(Setting).where(Setting.setting_name.in_(list(names)))
        ).scalars().all()
        return {row.setting_name: row.setting_value for row in rows}

    def set_many(self, values):
        """Upsert every entry of ``values`` in a single transaction."""
        session = self.db.session
        try:
            existing = {
                row.setting_name: row
                for row in session.execute(
                    self.db.select(Setting).where(Setting.setting_name.in_(list(values)))
                ).scalars()
            }
            for name, value in values.items():
                stored = encode_setting(value)
                row = existing.get(name)
                if row is None:
                    session.add(Setting(setting_name=name, setting_value=stored))
                else:
                    row.setting_value = stored
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception('Error saving %d settings', len(values))
            raise StorageError('Failed to save settings.') from exc

        logger.info('Saved %d settings', len(values))
