import logging
import os

from flask import Flask

from config import get_config
from db.database import init_db


def create_app(env=None):
    """Build the Flask application hosting the database and configuration."""
    config_class = get_config(env)

    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize database
    init_db(app)

    logging.basicConfig(
        level=getattr(logging, config_class.LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        filename=config_class.LOG_FILE,
    )
    logging.info(
        f"{config_class.APP_NAME} starting (env: {env or os.environ.get('FLASK_ENV', 'development')})"
    )

    return app
