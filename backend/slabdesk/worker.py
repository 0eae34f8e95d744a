"""
Celery worker entry point.

    celery -A slabdesk.worker worker --loglevel=info
"""

from . import create_app

app = create_app()
celery = app.extensions["celery"]
