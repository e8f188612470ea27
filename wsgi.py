"""
WSGI entry point, e.g. ``gunicorn wsgi:application``.
"""

from pbreader import config

config.load_env()
config.configure_logging()

from pbreader.web import create_app

application = create_app()
