# Overview: Celery app bound to the Flask app factory; tasks run inside an app context.

"""Celery application configuration."""

from celery import Celery, Task


class FlaskTask(Task):
    """Runs the task body inside the Flask app bound by init_celery."""

    def __call__(self, *args, **kwargs):
        flask_app = getattr(self.app, "flask_app", None)
        if flask_app is None:
            raise RuntimeError("Celery app is not bound to a Flask app; call init_celery(app)")
        with flask_app.app_context():
            return self.run(*args, **kwargs)


celery_app = Celery(
    "slabdesk",
    task_cls=FlaskTask,
    include=[
        "slabdesk.tasks.refresh_sales",
    ],
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minute timeout
    worker_prefetch_multiplier=1,
)


def init_celery(app):
    """Bind celery_app to a Flask app and load its CELERY_* settings."""
    celery_app.conf.update(
        broker_url=app.config["CELERY_BROKER_URL"],
        result_backend=app.config.get("CELERY_RESULT_BACKEND"),
        task_always_eager=app.config.get("CELERY_TASK_ALWAYS_EAGER", False),
    )
    celery_app.flask_app = app
    app.extensions["celery"] = celery_app
    return celery_app
