import logging
import os
import dotenv
from celery import Celery
from celery.signals import task_failure, task_success
from pathlib import Path

logger = logging.getLogger(__name__)

# Load environment variables from .env file before setting up Celery
BASE_DIR = Path(__file__).resolve().parent.parent
dotenv_path = os.path.join(BASE_DIR, '.env')
if os.path.exists(dotenv_path):
    dotenv.load_dotenv(dotenv_path)
    logger.info(f"Celery worker: Loaded .env file from {dotenv_path}")
else:
    logger.warning(f"Celery worker: .env file not found at {dotenv_path}")

# Set the default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'trash_talk_project.settings')

app = Celery('trash_talk_project')

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django app configs.
app.autodiscover_tasks(['api.song'])


@task_success.connect
def log_task_success(sender=None, result=None, **kwargs):
    logger.info(f"Task {sender.name} completed: {result}")


@task_failure.connect
def log_task_failure(sender=None, task_id=None, exception=None, **kwargs):
    logger.error(f"Task {sender.name} [{task_id}] failed: {exception!r}")


def check_queue_health():
    """
    Check that the Celery broker is reachable.

    Returns:
        dict: ``{'healthy': True, 'broker': 'connected'}`` or the error
    """
    try:
        with app.connection_for_write() as connection:
            connection.ensure_connection(max_retries=1)
        return {'healthy': True, 'broker': 'connected'}
    except Exception as e:
        return {'healthy': False, 'error': str(e)}
