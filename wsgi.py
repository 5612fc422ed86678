"""
WSGI / Flask-Migrate entry point.

Usage:
    flask --app wsgi db upgrade
    flask --app wsgi seed-registries
    gunicorn wsgi:app
"""

from release_console import create_app

app = create_app()
