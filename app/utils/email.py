# app/utils/email.py
from flask_mail import Message
from markupsafe import escape
from app import mail
from flask import current_app


def _wrap(title, body_html):
    return f"""
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <title>{escape(title)}</title>
    </head>
    <body style="margin:0; padding:0; background:#f8f9fa; font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif;">
    <table width="100%" cellpadding="0" cellspacing="0" style="background:#f8f9fa; padding:40px 20px;">
        <tr>
        <td align="center">
            <table width="100%" cellpadding="0" cellspacing="0" style="max-width:620px; background:#ffffff; border-radius:16px; overflow:hidden;">
                <tr>
                    <td style="background: linear-gradient(135deg, #2563eb, #1e40af); padding:30px 40px; color:#ffffff;">
                        <h1 style="margin:0; font-size:26px; font-weight:700;">VaultGuard</h1>
                        <p style="margin:8px 0 0; font-size:15px; color:#dbeafe;">{escape(title)}</p>
                    </td>
                </tr>
                <tr>
                    <td style="padding:40px 40px 30px; color:#333; font-size:16px; line-height:1.6;">
                    {body_html}
                    </td>
                </tr>
            </table>
            <div style="margin-top:30px; color:#aaa; font-size:12px;">
            This email was sent automatically by VaultGuard.
            </div>
        </td>
        </tr>
    </table>
    </body>
    </html>
    """


def _send(msg):
    try:
        mail.send(msg)
        return True
    except Exception as e:
        current_app.logger.error("Failed to send email '%s': %s", msg.subject, e)
        return False


def send_password_reset_email(user, reset_url):
    body = f"""
    <p>Hello <strong>{escape(user.full_name)}</strong>,</p>
    <p>Someone asked to reset the password of your VaultGuard account. If it was you, use the button below.</p>
    <div style="text-align:center; margin:35px 0;">
        <a href="{escape(reset_url)}"
           style="background:#2563eb; color:#ffffff; padding:14px 32px; text-decoration:none; border-radius:50px; font-weight:600;">
           Reset my password
        </a>
    </div>
    <p style="color:#888; font-size:14px;">If you did not ask for this, you can ignore this email.</p>
    """
    msg = Message(
        subject="Reset your VaultGuard password",
        recipients=[user.email],
        html=_wrap("Password reset", body)
    )
    return _send(msg)


def send_share_email(sender, item_name, recipients, subject, message):
    """
    Mail every recipient of a shared item. The message is plain text typed by the owner.
    """
    if not recipients:
        return False

    paragraphs = "".join(f"<p>{escape(line)}</p>" for line in message.splitlines() if line.strip())
    body = f"""
    <p><strong>{escape(sender.full_name)}</strong> ({escape(sender.email)}) shared an item with you:</p>
    <div style="background:#eff6ff; border-left:6px solid #2563eb; padding:20px; border-radius:8px; margin:25px 0;">
        <h3 style="margin:0; font-size:20px; color:#1e40af;">{escape(item_name)}</h3>
    </div>
    {paragraphs}
    """
    msg = Message(
        subject=subject,
        recipients=list(recipients),
        reply_to=sender.email,
        html=_wrap("Shared item", body),
        body=message or subject
    )
    return _send(msg)
