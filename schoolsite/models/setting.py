"""
Setting Model
"""

from schoolsite.extensions import db


class Setting(db.Model):
    """A named site setting; some names hold JSON-encoded values"""
    __tablename__ = 'settings'

    id = db.Column(db.Integer, primary_key=True)
    setting_name = db.Column(db.String(100), unique=True, nullable=False, index=True)
    setting_value = db.Column(db.Text)

    def __repr__(self):
        return f'<Setting {self.setting_name}>'
