# scripts/init_database.py

"""
Database initialization script.
Creates the contacts table (and its indexes) in the configured database.

Usage:
    FLASK_ENV=production DATABASE_URL=postgresql://... python scripts/init_database.py
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import app
from identity_app.models import Contact, db


def init_database():
    """Create all tables; existing tables are left untouched"""
    with app.app_context():
        db.create_all()
        count = db.session.query(Contact).count()
        print(f"Database ready at {db.engine.url.render_as_string(hide_password=True)}")
        print(f"contacts table holds {count} rows")


if __name__ == "__main__":
    init_database()
