from flask import Blueprint, request, jsonify
from flask_jwt_extended import create_access_token, set_access_cookies, unset_jwt_cookies

from akasia.models.user import User
from akasia.schemas.user import LoginSchema
from akasia.utils.auth import auth_required, current_user
from akasia.utils.validation import validate_payload

auth_bp = Blueprint('auth_bp', __name__, url_prefix='/auth')


@auth_bp.route('/login', methods=['POST'])
def login():
    payload, error = validate_payload(LoginSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    user = User.query.filter(
        User.username == payload.username,
        User.deleted_at.is_(None)
    ).first()

    if not user or not user.check_password(payload.password):
        return jsonify({'error': 'Invalid credentials'}), 401

    if not user.is_active:
        return jsonify({'error': 'Account is inactive'}), 403

    access_token = create_access_token(
        identity=str(user.id),
        additional_claims=user.get_jwt_claims()
    )

    response = jsonify({
        'access_token': access_token,
        'user': user.to_dict()
    })
    set_access_cookies(response, access_token)
    return response


@auth_bp.route('/logout', methods=['POST'])
def logout():
    response = jsonify({'message': 'Logged out'})
    unset_jwt_cookies(response)
    return response


@auth_bp.route('/me', methods=['GET'])
@auth_required
def get_current_user():
    return jsonify(current_user().to_dict())
