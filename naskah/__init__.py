from __future__ import annotations

import atexit
from pathlib import Path

from flask import Flask, current_app
from dotenv import load_dotenv

from .config import Config
from .extensions import csrf, db, migrate
from .db_utils import ensure_database_schema


BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

AUTOSAVER_KEY = "_CONFIG_AUTOSAVER"


def create_app(config_class: type[Config] = Config) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)

    register_extensions(app)
    register_blueprints(app)

    with app.app_context():
        ensure_database_schema()

    register_autosaver(app)

    return app


def register_extensions(app: Flask) -> None:
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)


def register_blueprints(app: Flask) -> None:
    from .documents import bp as documents_bp
    from .main import bp as main_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(documents_bp)


def register_autosaver(app: Flask) -> None:
    from .services.session_store import ConfigurationAutosaver, DatabaseStorage, SessionStore

    autosaver = ConfigurationAutosaver(
        SessionStore(DatabaseStorage()),
        interval=app.config.get("CONFIG_AUTOSAVE_SECONDS", 30.0),
        app=app,
    )
    app.config[AUTOSAVER_KEY] = autosaver
    if app.config.get("CONFIG_AUTOSAVE_ENABLED"):
        app.logger.info("Autosaving configuration every %.0fs", autosaver.interval)
        autosaver.start()
        atexit.register(autosaver.stop)


def get_autosaver():
    return current_app.config[AUTOSAVER_KEY]
