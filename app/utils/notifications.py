# app/utils/notifications.py
from flask import url_for
from app import db
from app.models.notification import Notification
from app.models.user import User


def send_notification(user_id, title, message, url):
    """
    Store an in-app notification (bell) for a user.
    """
    notif = Notification(user_id=user_id, title=title[:100], message=message[:255], url=url)
    db.session.add(notif)
    db.session.commit()
    return notif


def notify_share_recipients(sender, item_name, entries):
    """Bell entry for every recipient that has an account. Returns how many were sent."""
    emails = {entry.recipient_email for entry in entries}
    recipients = User.query.filter(User.email.in_(emails), User.id != sender.id).all() if emails else []
    permissions = {entry.recipient_email: entry.permission for entry in entries}
    for recipient in recipients:
        send_notification(
            user_id=recipient.id,
            title="New shared item",
            message=f"{sender.full_name} shared '{item_name}' with you ({permissions[recipient.email]})",
            url=url_for('sharing.index')
        )
    return len(recipients)
