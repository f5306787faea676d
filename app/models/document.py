# app/models/document.py
import os
from datetime import datetime
from flask import current_app
from app import db


def kind_for(filename):
    """Document kind (document, image, archive, audio, video) from the extension."""
    ext = os.path.splitext(filename)[1].lstrip('.').lower()
    for kind, extensions in current_app.config['DOCUMENT_KINDS'].items():
        if ext in extensions:
            return kind
    return 'document'


class Document(db.Model):
    __tablename__ = 'documents'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    filename = db.Column(db.String(255), nullable=False)  # name on disk
    mime_type = db.Column(db.String(100))
    size = db.Column(db.Integer, default=0)
    kind = db.Column(db.String(20), default='document', index=True)
    folder_id = db.Column(db.Integer, db.ForeignKey('folders.id', ondelete='SET NULL'))
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    uploaded_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    owner = db.relationship('User', backref=db.backref('documents', lazy='dynamic'))
    shares = db.relationship('ShareEntry', backref='document', cascade='all, delete-orphan')
    favorites = db.relationship('Favorite', backref='document', cascade='all, delete-orphan')

    @property
    def path(self):
        return os.path.join(current_app.config['UPLOAD_FOLDER'], self.filename)

    @property
    def is_shared(self):
        return len(self.shares) > 0

    def is_starred_by(self, user):
        return any(fav.user_id == user.id for fav in self.favorites)

    def to_dict(self):
        from flask import url_for
        return {
            'id': self.id,
            'name': self.name,
            'type': self.kind,
            'mimeType': self.mime_type,
            'size': self.size,
            'uploadedAt': self.uploaded_at.isoformat() if self.uploaded_at else None,
            'folderId': self.folder_id,
            'url': url_for('api.download_document', doc_id=self.id, _external=True),
        }
