# app/routes/sharing.py
from datetime import datetime, date
from flask import Blueprint, render_template, request, redirect, url_for, flash, abort, current_app
from flask_login import login_required, current_user
from app import db
from app.models.document import Document
from app.models.folder import Folder
from app.models.share import ShareEntry, PERMISSIONS
from app.models.contact import Contact
from app.routes.documents import log_activity
from app.utils.notifications import notify_share_recipients
from app.utils.email import send_share_email

sharing_bp = Blueprint('sharing', __name__)


# === HELPERS ===
def item_key(item):
    return f"{'document' if isinstance(item, Document) else 'folder'}:{item.id}"


def resolve_item(key):
    """'document:12' or 'folder:3' -> the owned Document/Folder, 404/403 otherwise."""
    kind, _, raw_id = (key or '').partition(':')
    if kind not in ('document', 'folder') or not raw_id.isdigit():
        abort(404)
    model = Document if kind == 'document' else Folder
    item = model.query.get_or_404(int(raw_id))
    if item.owner_id != current_user.id:
        abort(403)
    return item


def shared_items(owner):
    """Owner's items having at least one share entry, each with its entries."""
    grouped = {}
    entries = ShareEntry.query.filter_by(owner_id=owner.id).order_by(ShareEntry.created_at, ShareEntry.id).all()
    for entry in entries:
        item = entry.item
        key = item_key(item)
        if key not in grouped:
            grouped[key] = {'key': key, 'type': entry.item_type, 'name': item.name, 'item': item, 'entries': []}
        grouped[key]['entries'].append(entry)
    return sorted(grouped.values(), key=lambda it: it['name'].lower())


def filter_shared_items(items, search='', permission='all'):
    search = (search or '').strip().lower()
    result = []
    for item in items:
        if search and search not in item['name'].lower():
            continue
        if permission != 'all' and not any(e.permission == permission for e in item['entries']):
            continue
        result.append(item)
    return result


def parse_expiry(value):
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        return None


def share_item(item, emails, permission, expires_on=None):
    """
    Add or update one entry per recipient. Returns the entries touched.
    """
    if permission not in PERMISSIONS:
        raise ValueError(f"Unknown permission '{permission}'")

    column = ShareEntry.document_id if isinstance(item, Document) else ShareEntry.folder_id
    touched = []
    for email in emails:
        entry = ShareEntry.query.filter(column == item.id, ShareEntry.recipient_email == email).first()
        if entry is None:
            entry = ShareEntry(owner_id=item.owner_id, recipient_email=email)
            if isinstance(item, Document):
                entry.document_id = item.id
            else:
                entry.folder_id = item.id
            db.session.add(entry)
        entry.permission = permission
        entry.expires_on = expires_on
        touched.append(entry)
    db.session.commit()
    return touched


def shared_with(user, today=None):
    """
    Documents reachable by the user through live share entries. When a document
    is reachable twice (directly and through its folder) the broader entry wins.
    """
    today = today or date.today()
    best = {}
    entries = ShareEntry.query.filter_by(recipient_email=user.email).all()
    for entry in entries:
        if entry.is_expired(today):
            continue
        docs = [entry.document] if entry.document_id else entry.folder.documents.order_by(Document.name).all()
        for doc in docs:
            if doc.owner_id == user.id:
                continue
            current = best.get(doc.id)
            if current and PERMISSIONS.index(current['entry'].permission) >= PERMISSIONS.index(entry.permission):
                continue
            best[doc.id] = {'document': doc, 'entry': entry, 'via': None if entry.document_id else entry.folder}
    return sorted(best.values(), key=lambda row: (row['document'].name.lower(), row['document'].id))


def owned_entry(entry_id):
    entry = ShareEntry.query.get_or_404(entry_id)
    if entry.owner_id != current_user.id:
        abort(403)
    return entry


# === ROUTES ===
@sharing_bp.route('/')
@login_required
def index():
    search = request.args.get('q', '')
    permission = request.args.get('permission', 'all')
    if permission not in PERMISSIONS:
        permission = 'all'

    items = filter_shared_items(shared_items(current_user), search, permission)
    documents = Document.query.filter_by(owner_id=current_user.id).order_by(Document.name).all()
    folders = Folder.query.filter_by(owner_id=current_user.id).order_by(Folder.name).all()
    return render_template('sharing/index.html', items=items, search=search, permission=permission,
                           permissions=PERMISSIONS, contacts=current_user.contacts,
                           documents=documents, folders=folders, item_key=item_key,
                           incoming=shared_with(current_user), today=date.today())


#route to share an item with contacts
@sharing_bp.route('/share', methods=['POST'])
@login_required
def share():
    item = resolve_item(request.form.get('item'))
    contact_ids = [int(cid) for cid in request.form.getlist('recipients') if cid.isdigit()]
    contacts = Contact.query.filter(Contact.owner_id == current_user.id, Contact.id.in_(contact_ids)).all() if contact_ids else []
    if not contacts:
        flash("Select at least one recipient.", "warning")
        return redirect(url_for('sharing.index'))

    permission = request.form.get('permission', 'view')
    if permission not in PERMISSIONS:
        flash("Unknown permission.", "danger")
        return redirect(url_for('sharing.index'))

    expires_on = None
    if request.form.get('has_expiry') == 'on':
        expires_on = parse_expiry(request.form.get('expiry_date'))
        if expires_on is None:
            flash("Please pick a valid expiry date.", "danger")
            return redirect(url_for('sharing.index'))

    entries = share_item(item, [c.email for c in contacts], permission, expires_on)
    log_activity(current_user, 'share', document=item if isinstance(item, Document) else None,
                 name=item.name, owner_id=current_user.id)

    notify_share_recipients(current_user, item.name, entries)
    current_app.logger.info("User %s shared %s with %d recipient(s)", current_user.email, item_key(item), len(entries))
    flash(f"'{item.name}' shared with {len(entries)} recipient(s).", "success")
    return redirect(url_for('sharing.index'))


#route to revoke one recipient
@sharing_bp.route('/entries/<int:entry_id>/revoke', methods=['POST'])
@login_required
def revoke(entry_id):
    entry = owned_entry(entry_id)
    email, name = entry.recipient_email, entry.item.name
    db.session.delete(entry)
    db.session.commit()
    flash(f"Access to '{name}' revoked for {email}.", "info")
    return redirect(url_for('sharing.index'))


#route to change the permission of one recipient
@sharing_bp.route('/entries/<int:entry_id>/permission', methods=['POST'])
@login_required
def edit_permission(entry_id):
    entry = owned_entry(entry_id)
    permission = request.form.get('permission')
    if permission not in PERMISSIONS:
        flash("Unknown permission.", "danger")
        return redirect(url_for('sharing.index'))

    entry.permission = permission
    db.session.commit()
    flash(f"{entry.recipient_email} can now {permission} '{entry.item.name}'.", "success")
    return redirect(url_for('sharing.index'))


#route to add a contact
@sharing_bp.route('/contacts', methods=['POST'])
@login_required
def add_contact():
    email = request.form.get('email', '').lower().strip()
    if not email or '@' not in email:
        flash("Please enter a valid email address.", "danger")
        return redirect(url_for('sharing.index'))

    if Contact.query.filter_by(owner_id=current_user.id, email=email).first():
        flash(f"{email} is already in your contacts.", "info")
        return redirect(url_for('sharing.index'))

    db.session.add(Contact(owner_id=current_user.id, email=email))
    db.session.commit()
    flash(f"{email} added to your contacts.", "success")
    return redirect(url_for('sharing.index'))


#route to email every recipient of an item
@sharing_bp.route('/email', methods=['POST'])
@login_required
def send_email():
    item = resolve_item(request.form.get('item'))
    subject = request.form.get('subject', '').strip()
    message = request.form.get('message', '')
    if not subject:
        flash("Subject is required.", "danger")
        return redirect(url_for('sharing.index'))

    recipients = [entry.recipient_email for entry in item.shares]
    if not recipients:
        flash(f"'{item.name}' is not shared with anyone.", "warning")
        return redirect(url_for('sharing.index'))

    if send_share_email(current_user, item.name, recipients, subject, message):
        flash(f"Email sent to {len(recipients)} recipient(s).", "success")
    else:
        flash("The email could not be sent. Please try again later.", "danger")
    return redirect(url_for('sharing.index'))
