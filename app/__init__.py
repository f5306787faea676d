# app/__init__.py
from flask import Flask, redirect, url_for, request, jsonify, flash, render_template
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager, current_user
from flask_mail import Mail
from flask_bcrypt import Bcrypt
from werkzeug.exceptions import RequestEntityTooLarge
from config import Config
import os
from datetime import datetime

# === EXTENSIONS ===
db = SQLAlchemy()
login_manager = LoginManager()
mail = Mail()
bcrypt = Bcrypt()


login_manager.login_view = 'auth.login'
login_manager.login_message = "Please sign in to access your vault."
login_manager.login_message_category = 'info'


def wants_json():
    return (request.blueprint == 'api'
            or request.headers.get('X-Requested-With') == 'XMLHttpRequest')


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # === UPLOAD FOLDER ===
    upload_folder = app.config['UPLOAD_FOLDER']
    if not os.path.exists(upload_folder):
        app.logger.info("Creating upload folder %s", upload_folder)
        os.makedirs(upload_folder, exist_ok=True)

    from app.models.user import User

    # === INIT DB, LOGIN MANAGER, MAIL, BCRYPT ===
    db.init_app(app)
    login_manager.init_app(app)
    mail.init_app(app)
    bcrypt.init_app(app)

    # === USER LOADERS ===
    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.request_loader
    def load_user_from_request(req):
        header = req.headers.get('Authorization', '')
        if not header.startswith('Bearer '):
            return None
        from app.utils.security import load_api_token
        user_id = load_api_token(header[len('Bearer '):].strip())
        if user_id is None:
            return None
        return db.session.get(User, user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        if wants_json():
            return jsonify({"success": False, "message": "Authentication required"}), 401
        flash(login_manager.login_message, login_manager.login_message_category)
        return redirect(url_for('auth.login', next=request.path))

    # === TEMPLATE FILTERS ===
    from app.utils.formatting import format_bytes, format_date, format_datetime

    app.add_template_filter(format_bytes, 'filesizeformat')
    app.add_template_filter(format_date, 'date')
    app.add_template_filter(format_datetime, 'datetime')

    # === HOME ===
    @app.route('/')
    def index():
        if current_user.is_authenticated:
            return redirect(url_for('dashboard.index'))
        return redirect(url_for('auth.login'))

    # === NOTIFICATION BELL ON EVERY PAGE ===
    @app.context_processor
    def inject_notifications():
        from app.models.notification import Notification
        if current_user.is_authenticated:
            unread_count = Notification.unread_count(current_user.id)
            notifications = Notification.for_user(current_user.id, limit=5)
        else:
            unread_count = 0
            notifications = []
        return dict(unread_count=unread_count, notifications=notifications, now=datetime.now())

    # === ERRORS ===
    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(e):
        max_mb = app.config['MAX_UPLOAD_SIZE'] // (1024 * 1024)
        message = f"File too large (max {max_mb} MB)."
        if wants_json():
            return jsonify({"success": False, "message": message}), 413
        flash(message, "danger")
        return redirect(url_for('documents.index'))

    @app.errorhandler(404)
    def handle_404(e):
        if wants_json():
            return jsonify({"success": False, "message": "Not found"}), 404
        return render_template('errors/error.html', code=404,
                               message="The document or page you requested no longer exists."), 404

    @app.errorhandler(403)
    def handle_403(e):
        if wants_json():
            return jsonify({"success": False, "message": "Access denied"}), 403
        return render_template('errors/error.html', code=403,
                               message="You do not have access to this item."), 403

    # === BLUEPRINTS ===
    from .routes.auth import auth_bp
    from .routes.dashboard import dashboard_bp
    from .routes.documents import documents_bp
    from .routes.activity import activity_bp
    from .routes.sharing import sharing_bp
    from .routes.settings import settings_bp
    from .routes.api import api_bp

    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(dashboard_bp, url_prefix='/dashboard')
    app.register_blueprint(documents_bp, url_prefix='/documents')
    app.register_blueprint(activity_bp, url_prefix='/activity')
    app.register_blueprint(sharing_bp, url_prefix='/sharing')
    app.register_blueprint(settings_bp, url_prefix='/settings')
    app.register_blueprint(api_bp, url_prefix='/api')

    with app.app_context():
        from app import models  # noqa: F401
        db.create_all()

    return app

