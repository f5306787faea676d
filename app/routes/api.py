# app/routes/api.py
from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user
from app.models.document import Document
from app.models.user import User
from app.routes.documents import (
    filtered_documents, save_upload, rename_document, delete_document,
    send_document, user_can, log_activity, UploadError,
)
from app.routes.settings import update_profile, change_password
from app.utils.security import make_api_token, verify_totp

api_bp = Blueprint('api', __name__)


def error(message, status):
    return jsonify({"success": False, "message": message}), status


def get_document(doc_id, action):
    document = Document.query.get_or_404(doc_id)
    if not user_can(document, action):
        return None
    return document


# === AUTH ===
@api_bp.route('/auth/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get('email') or '').lower().strip()
    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(data.get('password') or ''):
        current_app.logger.warning("Failed API sign-in for %s", email)
        return error("Invalid email or password", 401)

    if user.is_2fa_enabled and not verify_totp(user.totp_secret, str(data.get('code') or '')):
        return error("Two-factor code required", 401)

    return jsonify({"success": True, "token": make_api_token(user), "user": user.to_dict()})


@api_bp.route('/auth/profile', methods=['GET', 'PUT'])
@login_required
def profile():
    if request.method == 'PUT':
        data = request.get_json(silent=True) or {}
        message = update_profile(current_user, data.get('fullName'))
        if message:
            return error(message, 400)
    return jsonify({"success": True, "user": current_user.to_dict()})


@api_bp.route('/auth/change-password', methods=['POST'])
@login_required
def change_password_api():
    data = request.get_json(silent=True) or {}
    new_password = data.get('newPassword') or ''
    message = change_password(current_user, data.get('currentPassword') or '', new_password,
                              data.get('confirmPassword', new_password))
    if message:
        return error(message, 400)
    return jsonify({"success": True, "message": "Password changed successfully"})


# === DOCUMENTS ===
@api_bp.route('/documents', methods=['GET'])
@login_required
def list_documents():
    documents = filtered_documents(current_user).all()
    return jsonify([doc.to_dict() for doc in documents])


@api_bp.route('/documents/search', methods=['GET'])
@login_required
def search_documents():
    query = request.args.get('query', '')
    documents = filtered_documents(current_user, search=query).all()
    return jsonify([doc.to_dict() for doc in documents])


@api_bp.route('/documents/upload', methods=['POST'])
@login_required
def upload_document():
    try:
        document = save_upload(request.files.get('file'), current_user)
    except UploadError as e:
        return error(str(e), 400)
    return jsonify(document.to_dict()), 201


@api_bp.route('/documents/rename/<int:doc_id>', methods=['PUT'])
@login_required
def rename(doc_id):
    document = get_document(doc_id, 'edit')
    if document is None:
        return error("Access denied", 403)

    data = request.get_json(silent=True) or {}
    if not rename_document(document, data.get('name'), current_user):
        return error("Name is required", 400)
    return jsonify(document.to_dict())


@api_bp.route('/documents/<int:doc_id>', methods=['DELETE'])
@login_required
def delete(doc_id):
    document = get_document(doc_id, 'delete')
    if document is None:
        return error("Access denied", 403)

    delete_document(document, current_user)
    return jsonify({"success": True})


@api_bp.route('/documents/<int:doc_id>/download', methods=['GET'])
@login_required
def download_document(doc_id):
    document = get_document(doc_id, 'download')
    if document is None:
        return error("Access denied", 403)

    response = send_document(document, as_attachment=True)
    if response is None:
        return error("File not found", 404)
    log_activity(current_user, 'download', document=document)
    return response
