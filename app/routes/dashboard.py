# app/routes/dashboard.py
from datetime import date
from flask import Blueprint, render_template, request, jsonify, current_app
from flask_login import login_required, current_user
from sqlalchemy import func
from app import db
from app.models.document import Document
from app.models.favorite import Favorite
from app.models.share import ShareEntry
from app.models.activity import Activity
from app.models.notification import Notification
from app.routes.documents import filtered_documents, SORT_OPTIONS, KIND_OPTIONS

dashboard_bp = Blueprint('dashboard', __name__)


def dashboard_stats(user):
    total_files = Document.query.filter_by(owner_id=user.id).count()
    total_size = db.session.query(
        func.coalesce(func.sum(Document.size), 0)
    ).filter(Document.owner_id == user.id).scalar()

    shared_files = db.session.query(Document.id).join(
        ShareEntry, ShareEntry.document_id == Document.id
    ).filter(Document.owner_id == user.id).distinct().count()

    starred_files = Favorite.query.join(Document).filter(
        Favorite.user_id == user.id,
        Document.owner_id == user.id
    ).count()

    return {
        'total_files': total_files,
        'total_size': int(total_size),
        'shared_files': shared_files,
        'starred_files': starred_files,
    }


def recent_activity(user, limit=None):
    limit = limit or current_app.config.get('RECENT_ACTIVITY_LIMIT', 5)
    return Activity.query.filter(
        Activity.user_id == user.id
    ).order_by(Activity.timestamp.desc(), Activity.id.desc()).limit(limit).all()


@dashboard_bp.route('/')
@login_required
def index():
    search = request.args.get('q', '').strip()
    kind = request.args.get('type', 'all')
    if kind not in KIND_OPTIONS:
        kind = 'all'
    sort = request.args.get('sort', 'date')
    if sort not in SORT_OPTIONS:
        sort = 'date'
    view_mode = 'list' if request.args.get('view') == 'list' else 'grid'

    files = filtered_documents(current_user, search=search, kind=kind, sort=sort).all()
    starred_ids = {fav.document_id for fav in current_user.user_favorites}

    return render_template(
        'dashboard/index.html',
        files=files,
        starred_ids=starred_ids,
        stats=dashboard_stats(current_user),
        activities=recent_activity(current_user),
        search=search, kind=kind, sort=sort, view_mode=view_mode,
        kind_options=KIND_OPTIONS, sort_options=SORT_OPTIONS,
        today=date.today()
    )


#route for the notifications list
@dashboard_bp.route('/notifications')
@login_required
def notifications():
    return render_template('dashboard/notifications.html', notifications=Notification.for_user(current_user.id))


@dashboard_bp.route('/notifications/<int:notif_id>/read', methods=['POST'])
@login_required
def mark_notification_read(notif_id):
    notif = Notification.query.get_or_404(notif_id)
    if notif.user_id != current_user.id:
        return jsonify(success=False), 403
    notif.mark_as_read()
    return jsonify(success=True)


@dashboard_bp.route('/notifications/unread_count')
@login_required
def unread_count():
    return jsonify({'count': Notification.unread_count(current_user.id)})
