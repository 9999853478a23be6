"""
Server-side Session Model
"""

from datetime import datetime, timezone
from schoolsite.extensions import db


def utcnow():
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SessionRecord(db.Model):
    """Session payload stored server-side, keyed by the cookie value"""
    __tablename__ = 'sessions'

    id = db.Column(db.Integer, primary_key=True)
    sid = db.Column(db.String(255), unique=True, nullable=False, index=True)
    data = db.Column(db.Text, nullable=False, default='{}')
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)

    def is_expired(self, now=None):
        return self.expires_at <= (now or utcnow())

    def __repr__(self):
        return f'<SessionRecord {self.sid[:8]} expires:{self.expires_at}>'
