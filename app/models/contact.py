# app/models/contact.py
from app import db


class Contact(db.Model):
    __tablename__ = 'contacts'
    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    email = db.Column(db.String(150), nullable=False)

    __table_args__ = (db.UniqueConstraint('owner_id', 'email', name='uq_owner_contact'),)

    owner = db.relationship('User', backref=db.backref('contacts', order_by='Contact.email'))
