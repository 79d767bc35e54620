from flask import Blueprint, jsonify, request

from akasia.services.image_service import ImageUploadError, upload_compressed_image
from akasia.utils.auth import auth_required

upload_bp = Blueprint('uploads', __name__, url_prefix='/uploads')

ALLOWED_FOLDERS = ('pengajuan', 'wallet', 'receipts')


@upload_bp.route('', methods=['POST'])
@auth_required
def upload_image():
    file = request.files.get('file')
    if file is None or not file.filename:
        return jsonify({'error': 'No file provided'}), 400

    folder = request.form.get('folder', 'pengajuan')
    if folder not in ALLOWED_FOLDERS:
        return jsonify({'error': f"Folder must be one of: {', '.join(ALLOWED_FOLDERS)}"}), 400

    try:
        uploaded = upload_compressed_image(file, folder)
    except ImageUploadError as e:
        return jsonify({'error': str(e)}), e.status_code

    return jsonify(uploaded), 201
