import re
from datetime import datetime

from app import db
from app.models import Favorite, ShareEntry, Notification
from app.routes.dashboard import dashboard_stats
from app.models.user import User
from tests.conftest import add_document, add_activity


def file_order(html):
    return re.findall(r'class="card h-100 file-row" data-name="([^"]+)"', html)


def seed_files(app, owner_id):
    add_document(app, owner_id, 'business_plan.docx', size=1_887_437, uploaded_at=datetime(2025, 5, 28))
    add_document(app, owner_id, 'family_photo.jpg', size=3_355_443, uploaded_at=datetime(2025, 5, 27))
    add_document(app, owner_id, 'Contract_draft.pdf', size=911_360, uploaded_at=datetime(2025, 5, 23))
    add_document(app, owner_id, 'vacation_photos.zip', size=12_897_484, uploaded_at=datetime(2025, 5, 24))


def test_default_sort_is_newest_first(logged_in, app, alice):
    seed_files(app, alice)
    html = logged_in.get('/dashboard/').get_data(as_text=True)
    assert file_order(html) == ['business_plan.docx', 'family_photo.jpg', 'vacation_photos.zip', 'Contract_draft.pdf']


def test_sort_by_name_ignores_case(logged_in, app, alice):
    seed_files(app, alice)
    html = logged_in.get('/dashboard/?sort=name').get_data(as_text=True)
    assert file_order(html) == ['business_plan.docx', 'Contract_draft.pdf', 'family_photo.jpg', 'vacation_photos.zip']


def test_sort_by_size_smallest_first(logged_in, app, alice):
    seed_files(app, alice)
    html = logged_in.get('/dashboard/?sort=size').get_data(as_text=True)
    assert file_order(html) == ['Contract_draft.pdf', 'business_plan.docx', 'family_photo.jpg', 'vacation_photos.zip']


def test_type_filter_and_search_combine(logged_in, app, alice):
    seed_files(app, alice)
    html = logged_in.get('/dashboard/?type=image').get_data(as_text=True)
    assert file_order(html) == ['family_photo.jpg']
    html = logged_in.get('/dashboard/?type=archive&q=PHOTO').get_data(as_text=True)
    assert file_order(html) == ['vacation_photos.zip']
    html = logged_in.get('/dashboard/?type=document&q=photo').get_data(as_text=True)
    assert file_order(html) == []


def test_unknown_sort_and_type_fall_back(logged_in, app, alice):
    seed_files(app, alice)
    html = logged_in.get('/dashboard/?sort=bogus&type=bogus').get_data(as_text=True)
    assert len(file_order(html)) == 4


def test_list_view(logged_in, app, alice):
    seed_files(app, alice)
    html = logged_in.get('/dashboard/?view=list').get_data(as_text=True)
    assert '<table' in html
    assert file_order(html) == []


def test_stats(app, alice):
    a = add_document(app, alice, 'a.pdf', size=1000)
    b = add_document(app, alice, 'b.jpg', size=500)
    with app.app_context():
        db.session.add(Favorite(user_id=alice, document_id=a))
        db.session.add(ShareEntry(owner_id=alice, document_id=b, recipient_email='x@example.com'))
        db.session.add(ShareEntry(owner_id=alice, document_id=b, recipient_email='y@example.com'))
        db.session.commit()
        stats = dashboard_stats(db.session.get(User, alice))
    assert stats == {'total_files': 2, 'total_size': 1500, 'shared_files': 1, 'starred_files': 1}


def test_recent_activity_shows_five_latest(logged_in, app, alice):
    for day in range(1, 8):
        add_activity(app, alice, 'upload', document_name=f'doc{day}.pdf', timestamp=datetime(2025, 5, day))
    html = logged_in.get('/dashboard/').get_data(as_text=True)
    # the sign-in itself is the newest entry
    assert 'doc7.pdf' in html and 'doc4.pdf' in html
    assert 'doc3.pdf' not in html and 'doc1.pdf' not in html


def test_notifications(logged_in, app, alice, bob):
    with app.app_context():
        mine = Notification(user_id=alice, title='Hello', message='Shared', url='/sharing/')
        other = Notification(user_id=bob, title='Other', message='Shared', url='/sharing/')
        db.session.add_all([mine, other])
        db.session.commit()
        mine_id, other_id = mine.id, other.id

    assert logged_in.get('/dashboard/notifications/unread_count').get_json() == {'count': 1}
    assert logged_in.post(f'/dashboard/notifications/{other_id}/read').status_code == 403
    assert logged_in.post(f'/dashboard/notifications/{mine_id}/read').get_json() == {'success': True}
    assert logged_in.get('/dashboard/notifications/unread_count').get_json() == {'count': 0}
    assert b'Hello' in logged_in.get('/dashboard/notifications').data
