"""
User Model
"""

from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from schoolsite.extensions import db


class User(UserMixin, db.Model):
    """Admin panel account"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f'<User {self.username}>'
