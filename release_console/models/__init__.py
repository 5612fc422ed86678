"""
Release Console
SQLAlchemy models package.

All models share the single ``db`` extension object; the app factory calls
``db.init_app(app)`` and imports every model module so that
``db.create_all()`` and Alembic see the full metadata.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
