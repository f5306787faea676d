# app/utils/seed.py
import os
import uuid
from datetime import datetime, date
from flask import current_app
from app import db
from app.models import User, Folder, Document, Favorite, ShareEntry, Contact, Activity
from app.models.document import kind_for

SAMPLE_DOCUMENTS = [
    # name, size in bytes, uploaded, starred, folder
    ("financial_report_2024.pdf", 2_516_582, datetime(2025, 5, 29, 20, 46), False, None),
    ("business_plan.docx", 1_887_437, datetime(2025, 5, 28, 9, 12), True, None),
    ("family_photo.jpg", 3_355_443, datetime(2025, 5, 27, 18, 3), False, "Family Photos"),
    ("passport_scan.jpg", 1_572_864, datetime(2025, 5, 26, 15, 15), True, None),
    ("tax_documents_2023.pdf", 4_928_307, datetime(2025, 5, 1, 11, 0), False, None),
    ("presentation.pptx", 5_347_737, datetime(2025, 5, 25, 14, 30), False, None),
    ("vacation_photos.zip", 12_897_484, datetime(2025, 5, 24, 10, 5), False, "Family Photos"),
    ("contract_draft.pdf", 911_360, datetime(2025, 5, 23, 16, 40), True, None),
]

SAMPLE_FOLDERS = ["Family Photos", "Personal Recipes"]

SAMPLE_CONTACTS = [
    "mom@gmail.com", "dad@gmail.com", "accountant@example.com",
    "bestfriend@gmail.com", "sister@gmail.com", "brother@gmail.com",
]

SAMPLE_SHARES = [
    # item name, recipient, permission, expiry
    ("Family Photos", "mom@gmail.com", "view", date(2026, 12, 31)),
    ("Family Photos", "dad@gmail.com", "download", None),
    ("tax_documents_2023.pdf", "accountant@example.com", "download", date(2026, 4, 15)),
    ("Personal Recipes", "bestfriend@gmail.com", "view", None),
    ("Personal Recipes", "sister@gmail.com", "edit", None),
]

SAMPLE_ACTIVITY = [
    ("upload", "financial_report_2024.pdf", datetime(2025, 5, 29, 20, 46), "Chrome/macOS"),
    ("download", "business_plan.docx", datetime(2025, 5, 29, 20, 46), "Chrome/macOS"),
    ("share", "family_photo.jpg", datetime(2025, 5, 29, 20, 46), "Chrome/macOS"),
    ("login", None, datetime(2025, 5, 27, 12, 30), "Chrome/macOS"),
    ("upload", "passport_scan.jpg", datetime(2025, 5, 26, 15, 15), "Safari/iOS"),
]


def seed_demo(email, password, full_name="Demo User"):
    """
    Create a demo account filled with sample documents, folders, contacts,
    shares and activity. Returns None if the account already exists.
    """
    email = email.lower().strip()
    if User.query.filter_by(email=email).first():
        return None

    user = User(email=email, full_name=full_name)
    user.set_password(password)
    db.session.add(user)
    db.session.flush()

    folders = {}
    for name in SAMPLE_FOLDERS:
        folders[name] = Folder(name=name, owner_id=user.id)
        db.session.add(folders[name])
    db.session.flush()

    upload_folder = current_app.config['UPLOAD_FOLDER']
    os.makedirs(upload_folder, exist_ok=True)
    documents = {}
    for name, size, uploaded_at, starred, folder_name in SAMPLE_DOCUMENTS:
        filename = f"{uuid.uuid4().hex}{os.path.splitext(name)[1]}"
        # placeholder bytes; the displayed size is the sample one
        with open(os.path.join(upload_folder, filename), 'wb') as fh:
            fh.write(f"VaultGuard sample document: {name}\n".encode('utf-8'))
        doc = Document(
            name=name,
            filename=filename,
            size=size,
            kind=kind_for(name),
            owner_id=user.id,
            folder_id=folders[folder_name].id if folder_name else None,
            uploaded_at=uploaded_at
        )
        db.session.add(doc)
        db.session.flush()
        documents[name] = doc
        if starred:
            db.session.add(Favorite(user_id=user.id, document_id=doc.id))

    for contact in SAMPLE_CONTACTS:
        db.session.add(Contact(owner_id=user.id, email=contact))

    for item_name, recipient, permission, expires_on in SAMPLE_SHARES:
        entry = ShareEntry(owner_id=user.id, recipient_email=recipient,
                           permission=permission, expires_on=expires_on)
        if item_name in folders:
            entry.folder_id = folders[item_name].id
        else:
            entry.document_id = documents[item_name].id
        db.session.add(entry)

    for action, doc_name, timestamp, agent in SAMPLE_ACTIVITY:
        doc = documents.get(doc_name)
        db.session.add(Activity(
            user_id=user.id,
            owner_id=user.id,
            document_id=doc.id if doc else None,
            document_name=doc_name,
            action=action,
            ip_address='192.168.1.45',
            user_agent=agent,
            timestamp=timestamp
        ))

    db.session.commit()
    return user
