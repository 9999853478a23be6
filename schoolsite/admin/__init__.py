"""
Admin Blueprint

Mutating API endpoints used by the admin panel. Every route here requires an
authenticated admin session.
"""

from flask import Blueprint

admin_bp = Blueprint('admin', __name__)

from schoolsite.admin import routes  # noqa: E402, F401
