# app/utils/security.py
import base64
import io
import re

import pyotp
import qrcode
import qrcode.image.svg
from flask import current_app
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

PASSWORD_MIN_LENGTH = 8
PASSWORD_RULES = [re.compile(r'[a-z]'), re.compile(r'[A-Z]'), re.compile(r'[0-9]'), re.compile(r'[^a-zA-Z0-9]')]


def validate_password(password):
    """Return an error message, or None when the password is acceptable."""
    if not password:
        return "Password is required."
    if len(password) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters."
    if not all(rule.search(password) for rule in PASSWORD_RULES):
        return "Password must include uppercase, lowercase, number, and symbol."
    return None


def validate_password_change(password, confirm):
    error = validate_password(password)
    if error:
        return error
    if password != confirm:
        return "Passwords do not match."
    return None


# === SIGNED TOKENS ===
def _serializer(salt):
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=salt)


def make_api_token(user):
    return _serializer('api-token').dumps({'uid': user.id})


def load_api_token(token):
    """User id carried by a bearer token, or None if it is invalid or expired."""
    try:
        data = _serializer('api-token').loads(token, max_age=current_app.config['API_TOKEN_MAX_AGE'])
    except (BadSignature, SignatureExpired):
        return None
    return data.get('uid')


def make_reset_token(user):
    # the current hash is part of the payload so a token dies once it has been used
    return _serializer('password-reset').dumps({'uid': user.id, 'pw': user.password[-10:]})


def load_reset_token(token):
    """Return (user_id, password fingerprint) or None."""
    try:
        data = _serializer('password-reset').loads(token, max_age=current_app.config['RESET_TOKEN_MAX_AGE'])
    except (BadSignature, SignatureExpired):
        return None
    return data.get('uid'), data.get('pw')


# === TWO-FACTOR (TOTP) ===
def new_totp_secret():
    return pyotp.random_base32()


def verify_totp(secret, code):
    if not secret or not code:
        return False
    code = code.replace(' ', '').strip()
    if not code.isdigit():
        return False
    return pyotp.TOTP(secret).verify(code, valid_window=1)


def totp_qr_data_uri(secret, email):
    """Provisioning QR code as an inline SVG data URI."""
    uri = pyotp.TOTP(secret).provisioning_uri(name=email, issuer_name=current_app.config['TOTP_ISSUER'])
    img = qrcode.make(uri, image_factory=qrcode.image.svg.SvgPathImage)
    buf = io.BytesIO()
    img.save(buf)
    return 'data:image/svg+xml;base64,' + base64.b64encode(buf.getvalue()).decode('ascii')
