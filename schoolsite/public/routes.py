"""
Public Routes
"""

from flask import current_app, jsonify, request, send_from_directory
from schoolsite.auth.decorators import admin_required
from schoolsite.public import public_bp
from schoolsite.services import get_services


def _page(name):
    return send_from_directory(current_app.static_folder, name)


@public_bp.route('/')
@public_bp.route('/school')
def index():
    """Public school site"""
    return _page('school.html')


@public_bp.route('/login', methods=['GET'])
def login_page():
    return _page('login.html')


@public_bp.route('/admin')
@admin_required
def admin_page():
    return _page('admin.html')


@public_bp.route('/uploads/<path:filename>')
def uploaded_file(filename):
    """Serve files written by the local-disk storage backend."""
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)


@public_bp.route('/api/settings', methods=['GET'])
def get_settings():
    return jsonify(get_services().settings.get_all())


@public_bp.route('/api/carousel', methods=['GET'])
def get_carousel():
    images = get_services().carousel.list()
    return jsonify([image.to_dict() for image in images])


@public_bp.route('/api/submit-contact', methods=['POST'])
def submit_contact():
    """Dispatch the contact form as a WhatsApp link or an email."""
    form = request.get_json(silent=True)
    if form is None:
        form = request.form
    return jsonify(get_services().contact.dispatch(form))
