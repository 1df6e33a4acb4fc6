# --- Flask-SQLAlchemy ORM helpers ---
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
# --- Flask app initialization ---
def init_db(app):
    # Import models so their tables are registered before create_all
    import models  # noqa: F401
    db.init_app(app)
    with app.app_context():
        db.create_all()
# --- Flask app context management ---
def get_session():
    """Get the session bound to the current app context."""
    return db.session
