import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from flask import Flask


PACKAGE_DIR = Path(__file__).resolve().parent

DEFAULT_SETTINGS = {
    "APP_NAME": "Scatter Explorer",
    "SECRET_KEY": "scatter-explorer-dev-secret",
    "MAX_CONTENT_LENGTH": 1024 * 1024 * 50,  # 50 MB
    "EXPLORER_SAMPLE_PATH": str(PACKAGE_DIR / "data" / "mnist_tsne.json"),
    "EXPLORER_FILTER_FIELD": None,
    "EXPLORER_MAX_SESSIONS": 256,
    "LOG_LEVEL": "INFO",
}


def configure_logging(app: Flask) -> None:
    level = app.config.get("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    app.logger.setLevel(level)


def create_app(test_config: Optional[Mapping[str, Any]] = None):
    """Application factory for the scatter explorer."""
    app = Flask(
        __name__,
        template_folder=str(PACKAGE_DIR / "templates"),
        static_folder=str(PACKAGE_DIR / "static"),
        static_url_path="/static",
    )
    app.config.update(DEFAULT_SETTINGS)
    app.config.from_prefixed_env("SCATTER")
    if test_config:
        app.config.update(test_config)

    configure_logging(app)

    from .routes import explorer_blueprint

    app.register_blueprint(explorer_blueprint)
    app.logger.debug("Sample dataset at %s", app.config["EXPLORER_SAMPLE_PATH"])

    return app
