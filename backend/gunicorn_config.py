"""
Gunicorn configuration for the TeamPay API.

- logs to stdout/stderr (GUNICORN_LOG_TO_FILES=1 writes to /app/logs/)
- workers: CPU cores * 2 + 1, sync
"""
import multiprocessing
import os

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
backlog = 2048

workers = int(os.environ.get("GUNICORN_WORKERS", multiprocessing.cpu_count() * 2 + 1))
worker_class = "sync"
# Subscription calls wait on YooKassa synchronously
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "60"))
keepalive = 2

LOG_TO_FILES = os.environ.get("GUNICORN_LOG_TO_FILES", "0") == "1"

if LOG_TO_FILES:
    accesslog = "/app/logs/gunicorn_access.log"
    errorlog = "/app/logs/gunicorn_error.log"
else:
    accesslog = "-"
    errorlog = "-"

loglevel = "info"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s"'

proc_name = "teampay"

daemon = False
umask = 0


def when_ready(server):
    server.log.info("Gunicorn is ready. Spawning %s workers", workers)


def post_fork(server, worker):
    server.log.info("Worker spawned (pid: %s)", worker.pid)


def worker_abort(worker):
    worker.log.warning("Worker received SIGABRT (pid: %s)", worker.pid)
