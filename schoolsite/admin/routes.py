"""
Admin Routes
"""

from flask import current_app, jsonify, request
from schoolsite.admin import admin_bp
from schoolsite.auth.decorators import admin_required
from schoolsite.errors import ValidationError
from schoolsite.services import get_services
from schoolsite.services.storage import store_upload

# (rule, multipart field, label used in messages)
IMAGE_UPLOADS = (
    ('/upload-logo', 'logo', 'Logo'),
    ('/upload-about-image', 'aboutImage', 'About image'),
    ('/upload-academics-image', 'academicsImage', 'Academics image'),
)


@admin_bp.route('/settings', methods=['POST'])
@admin_required
def save_settings():
    """Bulk upsert of site settings."""
    payload = request.get_json(silent=True)
    settings = payload.get('settings') if isinstance(payload, dict) else None
    if not isinstance(settings, dict):
        raise ValidationError("Missing or invalid 'settings' object.")

    get_services().settings.set_many(settings)
    return jsonify({'message': 'Settings saved successfully'})


def _image_upload_view(field, label):
    @admin_required
    def upload_image():
        file = request.files.get(field)
        if file is None or not file.filename:
            raise ValidationError(f'No {label} file provided.')

        url = store_upload(get_services().storage, file, current_app.config['ALLOWED_EXTENSIONS'])
        return jsonify({'message': f'{label} uploaded successfully.', 'url': url})
    return upload_image


for _rule, _field, _label in IMAGE_UPLOADS:
    admin_bp.add_url_rule(
        _rule,
        endpoint=f'upload_{_field}',
        view_func=_image_upload_view(_field, _label),
        methods=['POST'],
    )


@admin_bp.route('/carousel', methods=['POST'])
@admin_required
def add_carousel_image():
    """Upload a carousel image and append it to the display order."""
    file = request.files.get('carouselImage')
    if file is None or not file.filename:
        raise ValidationError('No carousel image file uploaded.')

    image = get_services().carousel.add(
        file,
        link_url=request.form.get('linkURL'),
        alt_text=request.form.get('altText'),
    )
    return jsonify({'message': 'Carousel image added successfully.', 'image': image.to_dict()}), 201


@admin_bp.route('/carousel/<image_id>', methods=['DELETE'])
@admin_required
def delete_carousel_image(image_id):
    """Remove a carousel image record and its stored file."""
    try:
        image_id = int(image_id)
    except ValueError:
        raise ValidationError('Invalid image ID.')

    get_services().carousel.remove(image_id)
    return jsonify({'message': 'Carousel image deletion processed.'})
