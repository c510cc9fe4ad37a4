import multiprocessing
import os

wsgi_app = "config.wsgi:application"
bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.environ.get("WEB_CONCURRENCY", multiprocessing.cpu_count() * 2 + 1))
accesslog = "-"
errorlog = "-"
worker_class = "gthread"
threads = int(os.environ.get("GUNICORN_THREADS", 4))
# Imports run inside the request; large legacy files need a long window.
timeout = int(os.environ.get("GUNICORN_TIMEOUT", 900))
