import os
from flask import Flask
from .config import load_config
from .routes import routes_bp
from .services.fileReceiver import FileReceiver
from .services.imageStore import ImageStore
from .services.uploadPipeline import UploadPipeline
from .utils.logging import logger

# room for the multipart envelope around a maximum-size file
MULTIPART_OVERHEAD = 64 * 1024


def create_app(config=None):
    """Build the Flask app.

    `config` overrides values loaded from the environment; passing a
    DATABASE_URL skips environment resolution entirely. Raises GalleryError
    (CONFIG_FAILURE) when the environment lacks required settings.
    """
    # Create Flask app
    app = Flask(__name__)

    # --- Configuration ---
    config = config or {}
    if "DATABASE_URL" in config:
        base = load_config({"DATABASE_URL": config["DATABASE_URL"]})
    else:
        base = load_config()
    app.config.update({**base, **config})
    app.config["MAX_CONTENT_LENGTH"] = app.config["UPLOAD_MAX_BYTES"] + MULTIPART_OVERHEAD

    # Ensure directories exist
    os.makedirs(app.config["CONTENT_DIR"], exist_ok=True)
    logger.info(f"Environment: {app.config['APP_ENV']}")

    # --- Store setup ---
    store = ImageStore(app.config["DATABASE_URL"], timeout=app.config["DATABASE_TIMEOUT"])
    store.create_tables()
    logger.info("Database tables initialized")

    receiver = FileReceiver(
        app.config["CONTENT_DIR"],
        max_bytes=app.config["UPLOAD_MAX_BYTES"],
        write_timeout=app.config["UPLOAD_WRITE_TIMEOUT"],
    )
    app.extensions["gallery"] = {
        "store": store,
        "pipeline": UploadPipeline(receiver, store),
    }

    # --- Register routes blueprint ---
    app.register_blueprint(routes_bp)

    logger.info("Flask app created successfully")
    return app
