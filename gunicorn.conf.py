import multiprocessing
import os


bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("GUNICORN_WORKERS", max(2, multiprocessing.cpu_count() * 2 + 1)))
worker_class = "sync"
# Store snapshots live per worker process; threads share them.
threads = int(os.getenv("GUNICORN_THREADS", "2"))
wsgi_app = "shift_roster.wsgi:app"
timeout = 60
graceful_timeout = 30
keepalive = 5
accesslog = "-"
errorlog = "-"
