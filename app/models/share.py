# app/models/share.py
from datetime import datetime, date
from app import db

PERMISSIONS = ('view', 'download', 'edit')

# Each level includes what the previous ones allow
PERMISSION_GRANTS = {
    'view': {'view'},
    'download': {'view', 'download'},
    'edit': {'view', 'download', 'edit'},
}


class ShareEntry(db.Model):
    __tablename__ = 'share_entries'
    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    document_id = db.Column(db.Integer, db.ForeignKey('documents.id', ondelete='CASCADE'))
    folder_id = db.Column(db.Integer, db.ForeignKey('folders.id', ondelete='CASCADE'))
    recipient_email = db.Column(db.String(150), nullable=False, index=True)
    permission = db.Column(db.String(20), nullable=False, default='view')
    expires_on = db.Column(db.Date)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('document_id', 'recipient_email', name='uq_document_recipient'),
        db.UniqueConstraint('folder_id', 'recipient_email', name='uq_folder_recipient'),
        db.CheckConstraint('(document_id IS NULL) != (folder_id IS NULL)', name='ck_share_single_item'),
    )

    owner = db.relationship('User')

    @property
    def item(self):
        return self.document or self.folder

    @property
    def item_type(self):
        return 'document' if self.document_id else 'folder'

    def is_expired(self, today=None):
        if self.expires_on is None:
            return False
        return self.expires_on < (today or date.today())

    def grants(self, action):
        return not self.is_expired() and action in PERMISSION_GRANTS.get(self.permission, set())
