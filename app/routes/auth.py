# app/routes/auth.py
from flask import Blueprint, render_template, request, redirect, url_for, flash, session, current_app
from flask_login import login_user, logout_user, login_required, current_user
from urllib.parse import urlparse
from app.models import User
from app import db
from app.utils.security import validate_password_change, verify_totp, make_reset_token, load_reset_token
from app.utils.email import send_password_reset_email

auth_bp = Blueprint('auth', __name__)

PENDING_2FA_KEY = '2fa_user_id'


def _safe_next(target):
    if target and not urlparse(target).netloc and target.startswith('/'):
        return target
    return url_for('dashboard.index')


def complete_login(user, remember=False):
    from app.routes.documents import log_activity
    login_user(user, remember=remember)
    user.last_login = db.func.now()
    db.session.commit()
    log_activity(user, 'login')
    current_app.logger.info("User %s signed in", user.email)


# login route
@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    if current_user.is_authenticated:
        return redirect(url_for('dashboard.index'))

    if request.method == 'POST':
        email = request.form.get('email', '').lower().strip()
        password = request.form.get('password', '')
        remember = request.form.get('remember_me') == 'on'
        user = User.query.filter_by(email=email).first()

        if not user or not user.check_password(password):
            current_app.logger.warning("Failed sign-in for %s from %s", email, request.remote_addr)
            flash("Invalid email or password.", "danger")
            return render_template('auth/login.html', email=email), 401

        if user.is_2fa_enabled:
            session[PENDING_2FA_KEY] = user.id
            session['2fa_remember'] = remember
            session['2fa_next'] = request.args.get('next')
            return redirect(url_for('auth.two_factor'))

        complete_login(user, remember=remember)
        flash(f"Welcome back, {user.full_name}!", "success")
        return redirect(_safe_next(request.args.get('next')))

    return render_template('auth/login.html')


#route for the second login step when 2FA is on
@auth_bp.route('/2fa', methods=['GET', 'POST'])
def two_factor():
    user_id = session.get(PENDING_2FA_KEY)
    user = db.session.get(User, user_id) if user_id else None
    if user is None:
        return redirect(url_for('auth.login'))

    if request.method == 'POST':
        if not verify_totp(user.totp_secret, request.form.get('code', '')):
            flash("Invalid authentication code.", "danger")
            return render_template('auth/two_factor.html'), 401

        remember = session.pop('2fa_remember', False)
        next_url = session.pop('2fa_next', None)
        session.pop(PENDING_2FA_KEY, None)
        complete_login(user, remember=remember)
        flash(f"Welcome back, {user.full_name}!", "success")
        return redirect(_safe_next(next_url))

    return render_template('auth/two_factor.html')


# sign-up route
@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    if current_user.is_authenticated:
        return redirect(url_for('dashboard.index'))

    if request.method == 'POST':
        full_name = request.form.get('full_name', '').strip()
        email = request.form.get('email', '').lower().strip()
        password = request.form.get('password', '')
        password_confirm = request.form.get('password_confirm', '')

        # === VALIDATIONS ===
        if not all([email, password, password_confirm]):
            flash("All required fields must be filled in.", "danger")
            return render_template('auth/register.html', email=email, full_name=full_name), 400

        if '@' not in email:
            flash("Please enter a valid email address.", "danger")
            return render_template('auth/register.html', email=email, full_name=full_name), 400

        error = validate_password_change(password, password_confirm)
        if error:
            flash(error, "danger")
            return render_template('auth/register.html', email=email, full_name=full_name), 400

        if User.query.filter_by(email=email).first():
            flash("This email is already registered.", "danger")
            return render_template('auth/register.html', email=email, full_name=full_name), 400

        user = User(
            full_name=full_name or email.split('@')[0],
            email=email
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        current_app.logger.info("New account %s", email)

        flash("Your account has been created. You can now sign in.", "success")
        return redirect(url_for('auth.login'))

    return render_template('auth/register.html')


#route for the forgotten password form
@auth_bp.route('/forgot', methods=['GET', 'POST'])
def forgot_password():
    if request.method == 'POST':
        email = request.form.get('email', '').lower().strip()
        if not email:
            flash("Email address is required.", "danger")
            return render_template('auth/forgot.html'), 400

        user = User.query.filter_by(email=email).first()
        if user:
            token = make_reset_token(user)
            send_password_reset_email(user, url_for('auth.reset_password', token=token, _external=True))

        # same answer whether or not the account exists
        flash(f"Password reset link sent to {email}", "info")
        return redirect(url_for('auth.login'))

    return render_template('auth/forgot.html')


@auth_bp.route('/reset/<token>', methods=['GET', 'POST'])
def reset_password(token):
    payload = load_reset_token(token)
    user = db.session.get(User, payload[0]) if payload else None
    if user is None or user.password[-10:] != payload[1]:
        flash("This reset link is invalid or has expired.", "danger")
        return redirect(url_for('auth.forgot_password'))

    if request.method == 'POST':
        error = validate_password_change(request.form.get('password', ''),
                                         request.form.get('password_confirm', ''))
        if error:
            flash(error, "danger")
            return render_template('auth/reset.html', token=token), 400

        user.set_password(request.form['password'])
        db.session.commit()
        flash("Your password has been reset. You can now sign in.", "success")
        return redirect(url_for('auth.login'))

    return render_template('auth/reset.html', token=token)


# logout route
@auth_bp.route('/logout')
@login_required
def logout():
    logout_user()
    flash("You have been signed out.", "info")
    return redirect(url_for('auth.login'))
