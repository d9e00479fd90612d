"""
Gunicorn Configuration

Uvicorn workers under Gunicorn. Every worker keeps its own dashboard view
and its own change subscription.
"""

import multiprocessing
import os

bind = os.getenv("BIND", "0.0.0.0:8000")
workers = int(os.getenv("WORKERS", min(multiprocessing.cpu_count(), 4)))
worker_class = "uvicorn.workers.UvicornWorker"
timeout = 60
keepalive = 5
graceful_timeout = 30

proc_name = "sales-dashboard-api"

errorlog = "-"
accesslog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
