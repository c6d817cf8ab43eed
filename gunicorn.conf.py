#!/usr/bin/env python3
"""
Gunicorn configuration for the Registration Intake Service
Paths and sizing come from the environment so the same file works per host
"""

import multiprocessing
import os

# Server socket
bind = os.environ.get("GUNICORN_BIND", "127.0.0.1:8000")
backlog = 2048

# Worker processes
workers = int(os.environ.get("GUNICORN_WORKERS", min(multiprocessing.cpu_count() * 2 + 1, 4)))
worker_class = "sync"
timeout = 30
keepalive = 2

# Restart workers after this many requests
max_requests = 1000
max_requests_jitter = 100

# Logging ("-" means stdout/stderr)
accesslog = os.environ.get("GUNICORN_ACCESS_LOG", "-")
errorlog = os.environ.get("GUNICORN_ERROR_LOG", "-")
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s"'

# Process naming
proc_name = "registration_intake"

# Daemon mode
daemon = False

# MongoClient is not fork-safe: each worker builds its own app and client
preload_app = False

# Security
limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190

def on_starting(server):
    server.log.info("Starting Registration Intake Service")

def on_reload(server):
    server.log.info("Reloading Registration Intake Service")

def when_ready(server):
    server.log.info("Registration Intake Service is ready. Listening on: %s", server.address)

def on_exit(server):
    server.log.info("Shutting down Registration Intake Service")
