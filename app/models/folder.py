# app/models/folder.py
from datetime import datetime
from app import db


class Folder(db.Model):
    __tablename__ = 'folders'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    documents = db.relationship('Document', backref='folder', lazy='dynamic')
    shares = db.relationship('ShareEntry', backref='folder', cascade='all, delete-orphan')
    owner = db.relationship('User', backref='folders')
