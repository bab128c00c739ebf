# app/decorators.py
import os
import time
from functools import wraps
from flask import request, jsonify, current_app, g

FILE_TYPE_MAP = {
    'image/png': 'png',
    'image/jpeg': 'jpeg',
    'image/jpg': 'jpg',
}


class UploadError(Exception):
    """Raised while storing an uploaded file. Converted to a 500 envelope."""


def generate_filename(original_name, mimetype):
    """`<name-with-spaces-as-dashes>-<epoch millis>.<ext>`"""
    # Drop control characters and any directory component a client may have sent
    cleaned = ''.join(ch for ch in (original_name or '') if ch.isprintable())
    base = os.path.basename(cleaned.replace('\\', '/'))
    if base.strip() in ('', '.', '..'):
        raise UploadError('invalid file name')
    name = '-'.join(base.split(' '))
    extension = FILE_TYPE_MAP[mimetype]
    return f"{name}-{int(time.time() * 1000)}.{extension}"


def save_upload(file_storage):
    """Validates the MIME type, writes the file and returns the stored filename."""
    if file_storage.mimetype not in FILE_TYPE_MAP:
        raise UploadError('invalid image type')

    upload_folder = current_app.config['UPLOAD_FOLDER']
    filename = generate_filename(file_storage.filename, file_storage.mimetype)
    try:
        file_storage.save(os.path.join(upload_folder, filename))
    except (OSError, ValueError) as e:
        raise UploadError(f'could not store image: {e}') from e
    return filename


def _attached(files):
    return [f for f in files if f and f.filename]


def _missing_file_response():
    return jsonify({'success': False, 'message': 'Image file is not presented'}), 400


def _upload_error_response(error):
    current_app.logger.error(f"Upload failed on {request.path}: {error}")
    return jsonify({'success': False, 'message': str(error)}), 500


def upload_single(field):
    """
    Stores the single file sent under `field` before calling the view.
    The stored filename is available as g.uploaded_file.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            files = _attached(request.files.getlist(field))
            if not files:
                return _missing_file_response()
            if len(files) > 1:
                return _upload_error_response(UploadError('Unexpected field'))
            try:
                g.uploaded_file = save_upload(files[0])
            except UploadError as e:
                return _upload_error_response(e)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def upload_array(field, max_count):
    """
    Stores up to `max_count` files sent under `field` before calling the view.
    The stored filenames are available, in upload order, as g.uploaded_files.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            files = _attached(request.files.getlist(field))
            if not files:
                return _missing_file_response()
            if len(files) > max_count:
                return _upload_error_response(UploadError('Unexpected field'))
            try:
                g.uploaded_files = [save_upload(file_storage) for file_storage in files]
            except UploadError as e:
                return _upload_error_response(e)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def upload_url(filename):
    """Absolute URL of an uploaded file, built from the current request's scheme and host."""
    return f"{request.host_url}public/uploads/{filename}"
