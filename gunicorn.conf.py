"""
Gunicorn configuration file for production deployment.

Run with: gunicorn main:app -c gunicorn.conf.py
"""
import multiprocessing
import os
from pathlib import Path

# Load LOG_DIR from .env (via framework.config)
from framework.config import settings

LOG_DIR = Path(settings.LOG_DIR)
LOG_DIR.mkdir(parents=True, exist_ok=True)

# Server
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
backlog = 2048

# Worker processes; each one runs the lifespan (DB connect, seed, audit recorder)
workers = int(os.getenv("GUNICORN_WORKERS", min(multiprocessing.cpu_count() * 2 + 1, 4)))
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 1000
max_requests = 1000  # Restart worker after this many requests to avoid memory leaks
max_requests_jitter = 50
timeout = 60  # Worker timeout (seconds)
keepalive = 5

# Process name (from config; fallback to APP_NAME)
proc_name = (settings.GUNICORN_PROC_NAME or settings.APP_NAME.lower().replace(" ", "-"))[:32]

# Logging (paths built from LOG_DIR in .env)
accesslog = str(LOG_DIR / "gunicorn_access.log")
errorlog = str(LOG_DIR / "gunicorn_error.log")
loglevel = "info"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process management
daemon = False  # Managed by systemd, do not daemonize
pidfile = str(LOG_DIR / "gunicorn.pid")
umask = 0o007

# Engines and the audit queue are per worker; never share them through a preloaded parent
preload_app = False
worker_tmp_dir = "/dev/shm"

# Leave room for the audit recorder to drain on shutdown
graceful_timeout = int(settings.AUDIT_DRAIN_TIMEOUT) + 25

# Security
limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190


def when_ready(server):
    server.log.info("%s is ready. Listening on %s", settings.APP_NAME, server.address)


def on_exit(server):
    server.log.info("%s is shutting down.", settings.APP_NAME)


def post_fork(server, worker):
    server.log.info("Worker spawned (pid: %s)", worker.pid)


def worker_abort(worker):
    worker.log.info("Worker received SIGABRT signal")
