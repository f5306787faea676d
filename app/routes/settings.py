# app/routes/settings.py
from flask import Blueprint, render_template, request, redirect, url_for, flash, session, current_app
from flask_login import login_required, current_user
from app import db
from app.utils.security import validate_password_change, new_totp_secret, verify_totp, totp_qr_data_uri

settings_bp = Blueprint('settings', __name__)

PENDING_SECRET_KEY = 'pending_totp_secret'
NAME_MIN_LENGTH = 2


def update_profile(user, full_name):
    """Returns an error message, or None once saved."""
    full_name = (full_name or '').strip()
    if not full_name:
        return "Full name is required."
    if len(full_name) < NAME_MIN_LENGTH:
        return f"Name must be at least {NAME_MIN_LENGTH} characters."
    user.full_name = full_name[:100]
    db.session.commit()
    return None


def change_password(user, current_password, new_password, confirm_password):
    """Returns an error message, or None once the new password is stored."""
    if not current_password:
        return "Current password is required."
    error = validate_password_change(new_password, confirm_password)
    if error:
        return error
    if not user.check_password(current_password):
        return "Current password is incorrect."
    user.set_password(new_password)
    db.session.commit()
    current_app.logger.info("User %s changed their password", user.email)
    return None


@settings_bp.route('/')
@login_required
def index():
    return render_template('settings/index.html')


@settings_bp.route('/profile', methods=['POST'])
@login_required
def profile():
    error = update_profile(current_user, request.form.get('full_name'))
    if error:
        flash(error, "danger")
    else:
        flash("Profile updated successfully!", "success")
    return redirect(url_for('settings.index'))


@settings_bp.route('/password', methods=['POST'])
@login_required
def password():
    error = change_password(
        current_user,
        request.form.get('current_password', ''),
        request.form.get('new_password', ''),
        request.form.get('confirm_password', '')
    )
    if error:
        flash(error, "danger")
    else:
        flash("Password changed successfully!", "success")
    return redirect(url_for('settings.index'))


# === TWO-FACTOR AUTHENTICATION ===
@settings_bp.route('/2fa', methods=['GET', 'POST'])
@login_required
def two_factor_setup():
    if current_user.is_2fa_enabled:
        flash("Two-factor authentication is already enabled.", "info")
        return redirect(url_for('settings.index'))

    secret = session.get(PENDING_SECRET_KEY)
    if not secret:
        secret = new_totp_secret()
        session[PENDING_SECRET_KEY] = secret

    if request.method == 'POST':
        if not verify_totp(secret, request.form.get('code', '')):
            flash("Invalid code. Check the time on your device and try again.", "danger")
            return redirect(url_for('settings.two_factor_setup'))

        current_user.totp_secret = secret
        current_user.is_2fa_enabled = True
        db.session.commit()
        session.pop(PENDING_SECRET_KEY, None)
        current_app.logger.info("User %s enabled 2FA", current_user.email)
        flash("Two-factor authentication enabled.", "success")
        return redirect(url_for('settings.index'))

    return render_template('settings/two_factor.html', secret=secret,
                           qr_code=totp_qr_data_uri(secret, current_user.email))


@settings_bp.route('/2fa/disable', methods=['POST'])
@login_required
def two_factor_disable():
    if not current_user.check_password(request.form.get('password', '')):
        flash("Password is incorrect.", "danger")
        return redirect(url_for('settings.index'))

    current_user.totp_secret = None
    current_user.is_2fa_enabled = False
    db.session.commit()
    current_app.logger.info("User %s disabled 2FA", current_user.email)
    flash("Two-factor authentication disabled.", "info")
    return redirect(url_for('settings.index'))
