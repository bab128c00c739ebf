from flask import Blueprint, current_app, send_from_directory

# Serves uploaded product images back at the same prefix used in product URLs
main_bp = Blueprint('main', __name__)


@main_bp.route('/public/uploads/<path:filename>')
def uploaded_file(filename):
    """Serves an uploaded image.
    ---
    tags:
      - Uploads
    parameters:
      - in: path
        name: filename
        schema:
          type: string
        required: true
        description: Stored file name
    responses:
      200:
        description: The image file
      404:
        description: File not found
    """
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)
