# app/models/activity.py
from app import db
from datetime import datetime

# stored code -> label shown in the activity log
ACTIONS = {
    'upload': 'Uploaded',
    'view': 'Viewed',
    'download': 'Downloaded',
    'rename': 'Renamed',
    'share': 'Shared',
    'delete': 'Deleted',
    'login': 'Login',
}


class Activity(db.Model):
    __tablename__ = 'activities'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    # vault owner of the document touched (the actor for logins)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    document_id = db.Column(db.Integer, db.ForeignKey('documents.id', ondelete='SET NULL'))
    document_name = db.Column(db.String(255))
    action = db.Column(db.String(20), nullable=False, index=True)
    ip_address = db.Column(db.String(45))
    user_agent = db.Column(db.String(500))
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    user = db.relationship('User', foreign_keys=[user_id])

    @property
    def label(self):
        return ACTIONS.get(self.action, self.action.title())
