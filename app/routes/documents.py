# app/routes/documents.py
from flask import Blueprint, render_template, request, url_for, redirect, flash, current_app, send_file, abort
from flask_login import login_required, current_user
from app import db
from app.models.document import Document, kind_for
from app.models.folder import Folder
from app.models.favorite import Favorite
from app.models.share import ShareEntry
from app.models.activity import Activity
import os
import uuid
from sqlalchemy import func, or_

documents_bp = Blueprint('documents', __name__)

SORT_OPTIONS = ('date', 'name', 'size')
KIND_OPTIONS = ('all', 'document', 'image', 'archive', 'audio', 'video')


class UploadError(ValueError):
    pass


# === DYNAMIC CONFIG ===
def get_upload_folder():
    return current_app.config['UPLOAD_FOLDER']

def get_allowed_extensions():
    return current_app.config['ALLOWED_EXTENSIONS']

def get_max_file_size():
    return current_app.config.get('MAX_UPLOAD_SIZE') or 10 * 1024 * 1024

def allowed_file(filename, allowed_extensions):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in allowed_extensions


# === HELPERS ===
def user_can(document, action):
    """
    Owner can do everything. Others need a live share entry on the document
    or on its folder granting the action ('view', 'download', 'edit').
    """
    if not document or not current_user.is_authenticated:
        return False
    if document.owner_id == current_user.id:
        return True
    if action == 'delete':
        return False
    conditions = [ShareEntry.document_id == document.id]
    if document.folder_id:
        conditions.append(ShareEntry.folder_id == document.folder_id)
    entries = ShareEntry.query.filter(
        ShareEntry.recipient_email == current_user.email,
        or_(*conditions)
    ).all()
    return any(entry.grants(action) for entry in entries)


def log_activity(user, action, document=None, name=None, owner_id=None):
    act = Activity(
        user_id=user.id,
        owner_id=owner_id or (document.owner_id if document else user.id),
        document_id=document.id if document else None,
        document_name=name or (document.name if document else None),
        action=action,
        ip_address=request.remote_addr,
        user_agent=(request.user_agent.string or '')[:500]
    )
    db.session.add(act)
    db.session.commit()


def clean_name(name):
    """Display name without any directory part."""
    name = (name or '').replace('\\', '/').split('/')[-1].strip()
    return name[:255]


def filtered_documents(owner, search='', kind='all', sort='date', folder_id=None):
    """Query of the owner's documents matching the search, kind and folder, sorted."""
    query = Document.query.filter(Document.owner_id == owner.id)

    search = (search or '').strip()
    if search:
        query = query.filter(func.lower(Document.name).contains(search.lower(), autoescape=True))
    if kind and kind != 'all':
        query = query.filter(Document.kind == kind)
    if folder_id:
        query = query.filter(Document.folder_id == folder_id)

    if sort == 'name':
        return query.order_by(func.lower(Document.name).asc(), Document.id.asc())
    if sort == 'size':
        return query.order_by(Document.size.asc(), Document.id.asc())
    return query.order_by(Document.uploaded_at.desc(), Document.id.desc())


def save_upload(file, owner, folder=None):
    """
    Validate and store an uploaded file, returning the new Document.
    Raises UploadError with a user-facing message.
    """
    if file is None or not file.filename:
        raise UploadError("No file selected.")

    if not allowed_file(file.filename, get_allowed_extensions()):
        raise UploadError("File type not allowed.")

    max_size = get_max_file_size()
    if file.content_length and file.content_length > max_size:
        raise UploadError(f"File too large (max {max_size // (1024 * 1024)} MB).")

    display_name = clean_name(file.filename)
    ext = os.path.splitext(display_name)[1].lower()
    filename = f"{uuid.uuid4().hex}{ext}"
    upload_folder = get_upload_folder()
    filepath = os.path.join(upload_folder, filename)

    os.makedirs(upload_folder, exist_ok=True)
    file.save(filepath)

    size = os.path.getsize(filepath)
    if size > max_size:
        os.remove(filepath)
        raise UploadError(f"File too large (max {max_size // (1024 * 1024)} MB).")

    document = Document(
        name=display_name,
        filename=filename,
        mime_type=file.mimetype,
        size=size,
        kind=kind_for(display_name),
        folder_id=folder.id if folder else None,
        owner_id=owner.id
    )
    db.session.add(document)
    db.session.commit()
    log_activity(owner, 'upload', document=document)
    current_app.logger.info("User %s uploaded %s (%d bytes)", owner.email, display_name, size)
    return document


def rename_document(document, new_name, user):
    """Returns False when the new name is blank (the rename is cancelled)."""
    new_name = clean_name(new_name)
    if not new_name:
        return False
    document.name = new_name
    document.kind = kind_for(new_name)
    db.session.commit()
    log_activity(user, 'rename', document=document)
    return True


def delete_document(document, user):
    name, owner_id = document.name, document.owner_id
    filepath = document.path
    Activity.query.filter_by(document_id=document.id).update({'document_id': None})
    db.session.delete(document)
    db.session.commit()
    if os.path.exists(filepath):
        os.remove(filepath)
    log_activity(user, 'delete', name=name, owner_id=owner_id)
    current_app.logger.info("User %s deleted %s", user.email, name)


def send_document(document, as_attachment):
    if not os.path.exists(document.path):
        return None
    return send_file(document.path, as_attachment=as_attachment,
                     download_name=document.name, mimetype=document.mime_type)


def owned_folder(folder_id):
    if not folder_id:
        return None
    folder = Folder.query.get_or_404(folder_id)
    if folder.owner_id != current_user.id:
        abort(403)
    return folder


def back_to_list():
    return redirect(request.form.get('next') or request.referrer or url_for('documents.index'))


# === ROUTES ===
@documents_bp.route('/')
@login_required
def index():
    search = request.args.get('q', '').strip()
    folder_id = request.args.get('folder', type=int)
    documents = filtered_documents(current_user, search=search, folder_id=folder_id).all()
    folders = Folder.query.filter_by(owner_id=current_user.id).order_by(Folder.name).all()
    return render_template('documents/index.html', documents=documents, folders=folders,
                           search=search, folder_id=folder_id,
                           editing_id=request.args.get('edit', type=int))


#route to upload a file
@documents_bp.route('/upload', methods=['POST'])
@login_required
def upload():
    folder = owned_folder(request.form.get('folder_id', type=int))
    try:
        document = save_upload(request.files.get('file'), current_user, folder)
    except UploadError as e:
        flash(str(e), "danger")
        return redirect(url_for('documents.index'))

    flash(f"'{document.name}' uploaded.", "success")
    return redirect(url_for('documents.index'))


#route to download a file
@documents_bp.route('/<int:doc_id>/download')
@login_required
def download(doc_id):
    document = Document.query.get_or_404(doc_id)
    if not user_can(document, 'download'):
        abort(403)

    response = send_document(document, as_attachment=True)
    if response is None:
        flash("File not found on the server.", "danger")
        return redirect(url_for('documents.index'))

    log_activity(current_user, 'download', document=document)
    return response


#route to open a file in the browser
@documents_bp.route('/<int:doc_id>/view')
@login_required
def view(doc_id):
    document = Document.query.get_or_404(doc_id)
    if not user_can(document, 'view'):
        abort(403)

    response = send_document(document, as_attachment=False)
    if response is None:
        flash("File not found on the server.", "danger")
        return redirect(url_for('documents.index'))

    log_activity(current_user, 'view', document=document)
    return response


# === RENAME ===
@documents_bp.route('/<int:doc_id>/rename', methods=['POST'])
@login_required
def rename(doc_id):
    document = Document.query.get_or_404(doc_id)
    if not user_can(document, 'edit'):
        abort(403)

    old_name = document.name
    if rename_document(document, request.form.get('name', ''), current_user):
        flash(f"'{old_name}' renamed to '{document.name}'.", "success")
    return back_to_list()


#route to delete a file
@documents_bp.route('/<int:doc_id>/delete', methods=['POST'])
@login_required
def delete(doc_id):
    document = Document.query.get_or_404(doc_id)
    if not user_can(document, 'delete'):
        abort(403)

    name = document.name
    delete_document(document, current_user)
    flash(f"'{name}' deleted.", "info")
    return back_to_list()


#route to star / unstar a file
@documents_bp.route('/<int:doc_id>/star', methods=['POST'])
@login_required
def toggle_star(doc_id):
    document = Document.query.get_or_404(doc_id)
    if not user_can(document, 'view'):
        abort(403)

    fav = Favorite.query.filter_by(user_id=current_user.id, document_id=doc_id).first()
    if fav:
        db.session.delete(fav)
        flash(f"'{document.name}' removed from starred.", "info")
    else:
        db.session.add(Favorite(user_id=current_user.id, document_id=doc_id))
        flash(f"'{document.name}' starred.", "success")
    db.session.commit()
    return back_to_list()


#route to create a folder
@documents_bp.route('/folders', methods=['POST'])
@login_required
def create_folder():
    name = clean_name(request.form.get('name', ''))
    if not name:
        flash("Folder name is required.", "danger")
        return redirect(url_for('documents.index'))

    folder = Folder(name=name, owner_id=current_user.id)
    db.session.add(folder)
    db.session.commit()
    flash(f"Folder '{folder.name}' created.", "success")
    return redirect(url_for('documents.index', folder=folder.id))
