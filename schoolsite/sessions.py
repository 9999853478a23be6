"""
Server-side Sessions

The session cookie carries only an opaque id. The payload lives in the
``sessions`` table and expires a fixed time after creation; reads and writes
never extend it.
"""

import logging
import secrets

from flask import current_app
from flask.sessions import SessionInterface, SessionMixin, session_json_serializer
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import CallbackDict

from schoolsite.errors import SessionError
from schoolsite.extensions import db
from schoolsite.models import SessionRecord
from schoolsite.models.session import utcnow

logger = logging.getLogger(__name__)


def _new_sid():
    return secrets.token_urlsafe(32)


class ServerSideSession(CallbackDict, SessionMixin):
    """Session payload plus the bookkeeping needed to store it server-side."""

    def __init__(self, initial=None, sid=None, new=False, expires_at=None):
        def on_update(self):
            self.modified = True

        super().__init__(initial, on_update)
        self.sid = sid or _new_sid()
        self.new = new
        self.expires_at = expires_at
        self.modified = False
        self.destroyed = False
        self.needs_cookie = False
        self.previous_sids = []

    @property
    def is_authenticated(self):
        return bool(self.get('authenticated'))

    @property
    def username(self):
        return self.get('username') if self.is_authenticated else None

    def regenerate(self):
        """Move the payload to a fresh id; the old record is dropped on save."""
        if not self.new:
            self.previous_sids.append(self.sid)
        self.sid = _new_sid()
        self.new = True
        self.expires_at = None
        self.modified = True

    def destroy(self):
        self.clear()
        self.destroyed = True


class SqlAlchemySessionInterface(SessionInterface):
    """Store sessions in the application database."""

    serializer = session_json_serializer

    def open_session(self, app, request):
        sid = request.cookies.get(self.get_cookie_name(app))
        if sid:
            record = self._find(sid)
            if record is not None and not record.is_expired():
                try:
                    data = self.serializer.loads(record.data)
                except ValueError:
                    logger.warning('Discarding unreadable session payload for %s...', sid[:8])
                    data = {}
                return ServerSideSession(data, sid=sid, expires_at=record.expires_at)
        return ServerSideSession(new=True)

    def save_session(self, app, session, response):
        name = self.get_cookie_name(app)
        domain = self.get_cookie_domain(app)
        path = self.get_cookie_path(app)

        if session.destroyed or (not session and session.modified and not session.new):
            self.delete(session)
            response.delete_cookie(
                name, domain=domain, path=path,
                secure=self.get_cookie_secure(app),
                samesite=self.get_cookie_samesite(app),
                httponly=self.get_cookie_httponly(app),
            )
            return

        if not session:
            return

        if session.modified:
            try:
                self.persist(session)
            except SessionError:
                return

        if session.needs_cookie:
            response.set_cookie(
                name, session.sid,
                expires=session.expires_at,
                httponly=self.get_cookie_httponly(app),
                domain=domain,
                path=path,
                secure=self.get_cookie_secure(app),
                samesite=self.get_cookie_samesite(app),
            )
            session.needs_cookie = False

    def persist(self, session):
        """Write the session now. Raises SessionError if the store fails."""
        now = utcnow()
        try:
            for old_sid in session.previous_sids:
                db.session.execute(db.delete(SessionRecord).where(SessionRecord.sid == old_sid))

            record = self._find(session.sid, swallow=False)
            if record is None:
                db.session.execute(db.delete(SessionRecord).where(SessionRecord.expires_at <= now))
                session.expires_at = now + current_app.permanent_session_lifetime
                record = SessionRecord(sid=session.sid, created_at=now, expires_at=session.expires_at)
                db.session.add(record)
                session.needs_cookie = True

            record.data = self.serializer.dumps(dict(session))
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception('Could not persist session %s...', session.sid[:8])
            raise SessionError('Session save error') from exc

        session.previous_sids = []
        session.new = False
        session.modified = False

    def delete(self, session):
        sids = list(session.previous_sids)
        if not session.new:
            sids.append(session.sid)
        if not sids:
            return
        try:
            db.session.execute(db.delete(SessionRecord).where(SessionRecord.sid.in_(sids)))
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception('Could not delete session %s...', session.sid[:8])

    def _find(self, sid, swallow=True):
        try:
            return db.session.execute(
                db.select(SessionRecord).filter_by(sid=sid)
            ).scalar_one_or_none()
        except SQLAlchemyError:
            if not swallow:
                raise
            db.session.rollback()
            logger.exception('Session lookup failed')
            return None
