"""
Public Blueprint

Site pages and the read-only API the public site uses, plus the contact form.
"""

from flask import Blueprint

public_bp = Blueprint('public', __name__)

from schoolsite.public import routes  # noqa: E402, F401
