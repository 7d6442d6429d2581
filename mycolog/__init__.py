import logging

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate

from mycolog.config import Config

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()


@login_manager.unauthorized_handler
def unauthorized():
    return {"error": "Authentication required"}, 401


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # Per-app client handles; reconfiguring means building a new app/handle
    from mycolog.services.storage import ImageStore
    from mycolog.services.assistant import AssistantClient

    app.extensions["image_store"] = ImageStore(
        app.config["UPLOAD_FOLDER"],
        allowed_extensions=app.config["ALLOWED_IMAGE_EXTENSIONS"],
    )
    app.extensions["assistant"] = AssistantClient.from_config(app.config)

    # Register blueprints
    from mycolog.routes.main import bp as main_bp
    from mycolog.routes.auth import bp as auth_bp
    from mycolog.routes.batches import bp as batches_bp
    from mycolog.routes.stats import bp as stats_bp
    from mycolog.routes.settings import bp as settings_bp
    from mycolog.routes.notebook import bp as notebook_bp
    from mycolog.routes.assistant import bp as assistant_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(batches_bp, url_prefix="/batches")
    app.register_blueprint(stats_bp, url_prefix="/stats")
    app.register_blueprint(settings_bp, url_prefix="/settings")
    app.register_blueprint(notebook_bp, url_prefix="/notebook")
    app.register_blueprint(assistant_bp, url_prefix="/assistant")

    with app.app_context():
        from mycolog.models import User, Batch, UserConfig, Recipe, Note  # noqa: F401

    return app
