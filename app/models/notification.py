# app/models/notification.py
from app import db
from datetime import datetime


class Notification(db.Model):
    """Bell entry shown in the layout header (new shares, mostly)."""
    __tablename__ = 'notifications'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    title = db.Column(db.String(100), nullable=False)
    message = db.Column(db.String(255), nullable=False)
    url = db.Column(db.String(255), nullable=False)
    is_read = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    @classmethod
    def for_user(cls, user_id, limit=None):
        query = cls.query.filter_by(user_id=user_id).order_by(cls.created_at.desc(), cls.id.desc())
        return query.limit(limit).all() if limit else query.all()

    @classmethod
    def unread_count(cls, user_id):
        return cls.query.filter_by(user_id=user_id, is_read=False).count()

    def mark_as_read(self):
        self.is_read = True
        db.session.commit()
