"""
Flask Extensions

Admin authentication is session-based: the session itself lives server-side
(see schoolsite.sessions) and Flask-Login resolves the admin user from it.
"""

from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_mail import Mail

# Database instance
db = SQLAlchemy()

# Login manager for the admin panel
login_manager = LoginManager()

# Outgoing mail for the contact form
mail = Mail()
