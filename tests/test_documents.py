import os

from app import db
from app.models import Document, Activity, Favorite, Folder, ShareEntry
from tests.conftest import upload, add_document, login


def test_upload_stores_file_and_logs_activity(logged_in, app, alice):
    response = upload(logged_in, name='Q4 Report.pdf', content=b'hello vault')
    assert response.status_code == 302
    with app.app_context():
        doc = Document.query.one()
        assert doc.name == 'Q4 Report.pdf'
        assert doc.size == len(b'hello vault')
        assert doc.kind == 'document'
        assert doc.filename != doc.name
        assert os.path.exists(os.path.join(app.config['UPLOAD_FOLDER'], doc.filename))
        assert Activity.query.filter_by(action='upload', document_id=doc.id).count() == 1


def test_upload_classifies_images(logged_in, app):
    upload(logged_in, name='family_photo.JPG', content=b'\xff\xd8')
    with app.app_context():
        assert Document.query.one().kind == 'image'


def test_upload_rejects_disallowed_extension(logged_in, app):
    response = upload(logged_in, name='malware.exe')
    assert response.status_code == 302
    with app.app_context():
        assert Document.query.count() == 0
    page = logged_in.get('/documents/')
    assert b'File type not allowed' in page.data


def test_upload_without_file(logged_in, app):
    response = logged_in.post('/documents/upload', data={}, content_type='multipart/form-data', follow_redirects=True)
    assert b'No file selected' in response.data
    with app.app_context():
        assert Document.query.count() == 0


def test_upload_too_large(logged_in, app):
    app.config['MAX_CONTENT_LENGTH'] = 1024
    response = upload(logged_in, name='big.pdf', content=b'x' * 4096)
    assert response.status_code == 302
    with app.app_context():
        assert Document.query.count() == 0
    assert b'File too large' in logged_in.get('/documents/').data


def test_upload_of_exactly_the_size_limit_is_accepted(logged_in, app):
    limit = app.config['MAX_UPLOAD_SIZE']
    upload(logged_in, name='exact.pdf', content=b'x' * limit)
    with app.app_context():
        assert Document.query.one().size == limit


def test_upload_one_byte_over_the_limit_is_rejected(logged_in, app):
    limit = app.config['MAX_UPLOAD_SIZE']
    response = upload(logged_in, name='over.pdf', content=b'x' * (limit + 1))
    assert response.status_code == 302
    with app.app_context():
        assert Document.query.count() == 0
    assert os.listdir(app.config['UPLOAD_FOLDER']) == []
    assert b'File too large (max 10 MB)' in logged_in.get('/documents/').data


def test_upload_into_folder(logged_in, app, alice):
    logged_in.post('/documents/folders', data={'name': 'Taxes'})
    with app.app_context():
        folder_id = Folder.query.filter_by(name='Taxes').one().id
    upload(logged_in, name='tax.pdf', folder_id=str(folder_id))
    with app.app_context():
        assert Document.query.one().folder_id == folder_id


def test_search_is_case_insensitive(logged_in, app, alice):
    add_document(app, alice, 'Financial_Report.pdf')
    add_document(app, alice, 'holiday.jpg')
    page = logged_in.get('/documents/?q=REPORT')
    assert b'Financial_Report.pdf' in page.data
    assert b'holiday.jpg' not in page.data


def test_blank_search_lists_everything(logged_in, app, alice):
    add_document(app, alice, 'a.pdf')
    add_document(app, alice, 'b.pdf')
    page = logged_in.get('/documents/?q=%20%20')
    assert b'a.pdf' in page.data and b'b.pdf' in page.data


def test_search_without_match(logged_in, app, alice):
    add_document(app, alice, 'a.pdf')
    page = logged_in.get('/documents/?q=zzz')
    assert b'No documents match your search' in page.data


def test_only_own_documents_are_listed(logged_in, app, alice, bob):
    add_document(app, bob, 'bob-secret.pdf')
    assert b'bob-secret.pdf' not in logged_in.get('/documents/').data


def test_rename(logged_in, app, alice):
    doc_id = add_document(app, alice, 'old.pdf')
    logged_in.post(f'/documents/{doc_id}/rename', data={'name': '  new name.pdf '})
    with app.app_context():
        assert db.session.get(Document, doc_id).name == 'new name.pdf'
        assert Activity.query.filter_by(action='rename').count() == 1


def test_blank_rename_is_cancelled(logged_in, app, alice):
    doc_id = add_document(app, alice, 'keep.pdf')
    logged_in.post(f'/documents/{doc_id}/rename', data={'name': '   '})
    with app.app_context():
        assert db.session.get(Document, doc_id).name == 'keep.pdf'
        assert Activity.query.filter_by(action='rename').count() == 0


def test_rename_strips_directories(logged_in, app, alice):
    doc_id = add_document(app, alice, 'x.pdf')
    logged_in.post(f'/documents/{doc_id}/rename', data={'name': '../../etc/passwd'})
    with app.app_context():
        assert db.session.get(Document, doc_id).name == 'passwd'


def test_delete_removes_record_and_bytes(logged_in, app, alice):
    doc_id = add_document(app, alice, 'gone.pdf')
    with app.app_context():
        path = db.session.get(Document, doc_id).path
        db.session.add(ShareEntry(owner_id=alice, document_id=doc_id, recipient_email='bob@example.com'))
        db.session.commit()
    logged_in.post(f'/documents/{doc_id}/star')
    logged_in.post(f'/documents/{doc_id}/delete')
    with app.app_context():
        assert db.session.get(Document, doc_id) is None
        assert Favorite.query.count() == 0
        assert ShareEntry.query.count() == 0
        act = Activity.query.filter_by(action='delete').one()
        assert act.document_name == 'gone.pdf'
        assert act.document_id is None
    assert not os.path.exists(path)


def test_download_logs_activity(logged_in, app, alice):
    doc_id = add_document(app, alice, 'contract.pdf', size=10)
    response = logged_in.get(f'/documents/{doc_id}/download')
    assert response.status_code == 200
    assert 'attachment' in response.headers['Content-Disposition']
    assert 'contract.pdf' in response.headers['Content-Disposition']
    with app.app_context():
        assert Activity.query.filter_by(action='download', document_id=doc_id).count() == 1


def test_view_is_inline(logged_in, app, alice):
    doc_id = add_document(app, alice, 'scan.png', size=10)
    response = logged_in.get(f'/documents/{doc_id}/view')
    assert response.status_code == 200
    assert 'attachment' not in response.headers.get('Content-Disposition', '')


def test_download_missing_bytes(logged_in, app, alice):
    doc_id = add_document(app, alice, 'lost.pdf')
    with app.app_context():
        os.remove(db.session.get(Document, doc_id).path)
    response = logged_in.get(f'/documents/{doc_id}/download', follow_redirects=True)
    assert b'File not found on the server' in response.data


def test_other_users_documents_are_forbidden(client, app, alice, bob):
    doc_id = add_document(app, alice, 'private.pdf')
    login(client, email='bob@example.com')
    assert client.get(f'/documents/{doc_id}/download').status_code == 403
    assert client.post(f'/documents/{doc_id}/rename', data={'name': 'hacked.pdf'}).status_code == 403
    assert client.post(f'/documents/{doc_id}/delete').status_code == 403
    with app.app_context():
        assert db.session.get(Document, doc_id).name == 'private.pdf'


def test_missing_document_is_404(logged_in):
    assert logged_in.get('/documents/999/download').status_code == 404


def test_star_toggles(logged_in, app, alice):
    doc_id = add_document(app, alice, 'fav.pdf')
    logged_in.post(f'/documents/{doc_id}/star')
    with app.app_context():
        assert Favorite.query.filter_by(user_id=alice, document_id=doc_id).count() == 1
    logged_in.post(f'/documents/{doc_id}/star')
    with app.app_context():
        assert Favorite.query.count() == 0


def test_create_folder_requires_name(logged_in, app):
    logged_in.post('/documents/folders', data={'name': ' '})
    with app.app_context():
        assert Folder.query.count() == 0


def test_upload_with_garbage_folder_id_goes_to_root(logged_in, app):
    response = upload(logged_in, name='loose.pdf', folder_id='not-a-number')
    assert response.status_code == 302
    with app.app_context():
        assert Document.query.one().folder_id is None
