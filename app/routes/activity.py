# app/routes/activity.py
import csv
import io
from datetime import datetime, timedelta
from flask import Blueprint, render_template, request, current_app, Response
from flask_login import login_required, current_user
from sqlalchemy import func, or_
from app.models.activity import Activity, ACTIONS
from app.models.user import User

activity_bp = Blueprint('activity', __name__)

CSV_HEADERS = ['Username', 'Action', 'Document', 'Timestamp', 'IP Address']
CSV_FILENAME = 'vaultguard_activity_logs.csv'


def parse_day(value):
    try:
        return datetime.strptime(value, '%Y-%m-%d')
    except (TypeError, ValueError):
        return None


def label_to_code(label):
    for code, name in ACTIONS.items():
        if name == label:
            return code
    return None


def visible_activities(user):
    """Own actions, plus what others did to the user's documents."""
    return Activity.query.join(User, Activity.user_id == User.id).filter(
        or_(Activity.user_id == user.id, Activity.owner_id == user.id)
    )


def filter_activities(user, search='', start=None, end=None, action='All', username='All'):
    query = visible_activities(user)

    search = (search or '').strip().lower()
    if search:
        query = query.filter(or_(
            func.lower(Activity.document_name).contains(search, autoescape=True),
            func.lower(User.email).contains(search, autoescape=True)
        ))

    start_day = parse_day(start)
    if start_day:
        query = query.filter(Activity.timestamp >= start_day)
    end_day = parse_day(end)
    if end_day:
        # end of the selected day, 23:59:59 included
        query = query.filter(Activity.timestamp < end_day + timedelta(days=1))

    if action and action != 'All':
        query = query.filter(Activity.action == label_to_code(action))
    if username and username != 'All':
        query = query.filter(User.email == username)

    return query.order_by(Activity.timestamp.desc(), Activity.id.desc())


def filter_options(user):
    base = visible_activities(user)
    codes = [row[0] for row in base.with_entities(Activity.action).distinct().order_by(Activity.action)]
    emails = [row[0] for row in base.with_entities(User.email).distinct().order_by(User.email)]
    return ['All'] + [ACTIONS.get(code, code.title()) for code in codes], ['All'] + emails


def current_filters():
    return {
        'search': request.args.get('q', ''),
        'start': request.args.get('start', ''),
        'end': request.args.get('end', ''),
        'action': request.args.get('action', 'All'),
        'username': request.args.get('user', 'All'),
    }


def logs_to_csv(activities):
    buf = io.StringIO()
    buf.write(','.join(CSV_HEADERS) + '\n')
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator='\n')
    for act in activities:
        writer.writerow([
            act.user.email,
            act.label,
            act.document_name or '',
            act.timestamp.strftime('%Y-%m-%dT%H:%M:%SZ'),
            act.ip_address or '',
        ])
    return buf.getvalue()


@activity_bp.route('/')
@login_required
def index():
    filters = current_filters()
    query = filter_activities(current_user, **filters)
    per_page = current_app.config.get('LOGS_PER_PAGE', 5)

    total = query.count()
    last_page = max(1, (total + per_page - 1) // per_page)
    page = min(max(request.args.get('page', 1, type=int), 1), last_page)
    pagination = query.paginate(page=page, per_page=per_page, error_out=False)

    action_types, users = filter_options(current_user)
    return render_template('activity/index.html', pagination=pagination, logs=pagination.items,
                           filters=filters, action_types=action_types, users=users)


#route to export the filtered logs
@activity_bp.route('/export.csv')
@login_required
def export_csv():
    logs = filter_activities(current_user, **current_filters()).all()
    return Response(
        logs_to_csv(logs),
        mimetype='text/csv; charset=utf-8',
        headers={'Content-Disposition': f'attachment; filename={CSV_FILENAME}'}
    )
