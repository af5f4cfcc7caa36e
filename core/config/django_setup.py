"""
Minimal Django bootstrap.

Forms and the HTTP rendering helpers only need django.conf.settings to be
configured; the node package never runs inside a full Django project.
Settings come from the environment, with a .env file at the project root
filling in anything the process environment does not set.
"""

from pathlib import Path
from typing import Optional, Union

import django
from django.conf import settings
from dotenv import load_dotenv

from .env import get_env, get_env_bool

BASE_DIR = Path(__file__).resolve().parent.parent.parent


def load_environment(env_file: Optional[Union[str, Path]] = None) -> bool:
    """
    Load variables from `env_file` (default: BASE_DIR/.env) into os.environ.
    Variables already set in the process environment are kept.

    Returns:
        True if a file was found and loaded.
    """
    return load_dotenv(env_file or BASE_DIR / '.env')


def ensure_django_configured() -> None:
    """Configure Django settings once, if the host process has not already."""
    if settings.configured:
        return
    load_environment()
    settings.configure(
        DEBUG=get_env_bool('DJANGO_DEBUG', False),
        SECRET_KEY=get_env('DJANGO_SECRET_KEY', 'respond-to-webhook-insecure-key'),
        DEFAULT_CHARSET='utf-8',
        USE_I18N=False,
        INSTALLED_APPS=[],
    )
    django.setup()
