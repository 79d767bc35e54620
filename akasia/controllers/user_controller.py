from datetime import datetime

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from akasia.extensions import db
from akasia.models.user import User
from akasia.schemas.user import ChangePasswordSchema, CreateUserSchema, UpdateUserSchema
from akasia.utils.auth import admin_required, auth_required, current_user
from akasia.utils.validation import validate_payload

user_bp = Blueprint('users', __name__, url_prefix='/users')


def _get_user_or_none(user_id):
    user = db.session.get(User, user_id)
    if user is None or user.deleted_at is not None:
        return None
    return user


def _username_taken(username, exclude_id=None):
    query = User.query.filter(User.username == username)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


@user_bp.route('', methods=['GET'])
@admin_required()
def list_users():
    role = request.args.get('role')
    include_inactive = request.args.get('include_inactive', 'false').lower() == 'true'

    query = User.query.filter(User.deleted_at.is_(None))
    if role:
        query = query.filter(User.role == role)
    if not include_inactive:
        query = query.filter(User.is_active.is_(True))

    users = query.order_by(User.created_at.desc()).all()
    return jsonify([user.to_dict(with_counts=True) for user in users])


@user_bp.route('/<int:user_id>', methods=['GET'])
@admin_required()
def get_user(user_id):
    user = _get_user_or_none(user_id)
    if user is None:
        return jsonify({'error': 'User tidak ditemukan'}), 404
    return jsonify(user.to_dict(with_counts=True))


@user_bp.route('', methods=['POST'])
@admin_required('Hanya admin yang dapat menambah user')
def create_user():
    payload, error = validate_payload(CreateUserSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    if _username_taken(payload.username):
        return jsonify({'error': 'Username sudah digunakan'}), 409

    user = User(
        name=payload.name,
        username=payload.username,
        email=payload.email,
        role=payload.role,
    )
    user.set_password(payload.password)

    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'Username sudah digunakan'}), 409
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to create user %s", payload.username)
        return jsonify({'error': 'Gagal menambah user'}), 500

    return jsonify(user.to_dict()), 201


@user_bp.route('/<int:user_id>', methods=['PUT'])
@admin_required('Hanya admin yang dapat mengubah user')
def update_user(user_id):
    user = _get_user_or_none(user_id)
    if user is None:
        return jsonify({'error': 'User tidak ditemukan'}), 404

    payload, error = validate_payload(UpdateUserSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    if _username_taken(payload.username, exclude_id=user.id):
        return jsonify({'error': 'Username sudah digunakan'}), 409

    user.name = payload.name
    user.username = payload.username
    user.email = payload.email
    user.role = payload.role
    user.is_active = payload.is_active

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to update user %s", user_id)
        return jsonify({'error': 'Gagal mengubah user'}), 500

    return jsonify(user.to_dict())


@user_bp.route('/<int:user_id>/password', methods=['PUT'])
@auth_required
def change_password(user_id):
    actor = current_user()
    if not actor.is_admin and actor.id != user_id:
        return jsonify({'error': 'Tidak memiliki akses'}), 403

    user = _get_user_or_none(user_id)
    if user is None:
        return jsonify({'error': 'User tidak ditemukan'}), 404

    payload, error = validate_payload(ChangePasswordSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    user.set_password(payload.new_password)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to change password for user %s", user_id)
        return jsonify({'error': 'Gagal mengubah password'}), 500

    return jsonify({'message': 'Password berhasil diubah'})


@user_bp.route('/<int:user_id>', methods=['DELETE'])
@admin_required('Hanya admin yang dapat menghapus user')
def delete_user(user_id):
    if current_user().id == user_id:
        return jsonify({'error': 'Tidak dapat menghapus akun sendiri'}), 400

    user = _get_user_or_none(user_id)
    if user is None:
        return jsonify({'error': 'User tidak ditemukan'}), 404

    user.deleted_at = datetime.utcnow()
    user.is_active = False
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to delete user %s", user_id)
        return jsonify({'error': 'Gagal menghapus user'}), 500

    return jsonify({'message': 'User berhasil dihapus'})


@user_bp.route('/<int:user_id>/toggle-active', methods=['POST'])
@admin_required('Hanya admin yang dapat mengubah status user')
def toggle_active(user_id):
    if current_user().id == user_id:
        return jsonify({'error': 'Tidak dapat menonaktifkan akun sendiri'}), 400

    user = _get_user_or_none(user_id)
    if user is None:
        return jsonify({'error': 'User tidak ditemukan'}), 404

    user.is_active = not user.is_active
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to toggle user %s", user_id)
        return jsonify({'error': 'Gagal mengubah status user'}), 500

    return jsonify(user.to_dict())
