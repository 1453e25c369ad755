"""Gunicorn settings for the adgate API: ``gunicorn -c gunicorn.conf.py``."""

import os

from adgate.core.config import env_int

wsgi_app = "adgate:create_app()"
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")

# Rotation serializes on the refresh ledger row, so threads buy little.
workers = env_int("GUNICORN_WORKERS", 2)
threads = env_int("GUNICORN_THREADS", 1)
timeout = env_int("GUNICORN_TIMEOUT", 30)
graceful_timeout = 20
keepalive = 5

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# X-Forwarded-* is applied by ProxyFix inside the app (USE_PROXYFIX).
forwarded_allow_ips = os.getenv("FORWARDED_ALLOW_IPS", "*")
