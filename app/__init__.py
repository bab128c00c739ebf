# app/__init__.py
import os
import time
from flask import Flask, g, request
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from config import config_by_name

from .storage import Storage

bcrypt = Bcrypt()


def register_request_logging(app):
    """Logs one short access line per request once the response is ready."""
    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response):
        started = g.get('request_started')
        elapsed_ms = (time.perf_counter() - started) * 1000 if started else 0.0
        app.logger.info(
            f"{request.method} {request.full_path.rstrip('?')} {response.status_code} "
            f"{response.calculate_content_length() or '-'} - {elapsed_ms:.3f} ms"
        )
        return response


def create_app(config_name=None, mongo_client=None, overrides=None):
    """
    Application Factory Function

    `mongo_client` replaces the MongoClient built from MONGO_URI (tests pass
    an in-memory client). `overrides` is applied on top of the config class.
    """
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'default')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(app.config['LOG_LEVEL'])
    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

    # Initialize extensions
    bcrypt.init_app(app)
    CORS(
        app,
        origins="*",
        send_wildcard=True,
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"]
    )
    register_request_logging(app)

    # One storage handle for the whole process, passed to every blueprint
    storage = Storage.from_config(app.config, client=mongo_client)
    app.extensions['storage'] = storage
    try:
        storage.ping()
        app.logger.info("MongoDB connection successful.")
    except Exception as e:
        app.logger.error(f"MongoDB connection check failed: {e}")

    # Import and register Blueprints
    from .docs import init_docs
    from .orders import create_orders_blueprint
    from .products import create_products_blueprint
    from .routes import main_bp
    from .users import create_users_blueprint

    app.register_blueprint(create_users_blueprint(storage), url_prefix='/users')
    app.register_blueprint(
        create_products_blueprint(storage, app.config['GALLERY_MAX_IMAGES']),
        url_prefix='/products'
    )
    app.register_blueprint(create_orders_blueprint(storage), url_prefix='/orders')
    app.register_blueprint(main_bp)
    init_docs(app)

    return app
