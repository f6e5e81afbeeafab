"""
Gunicorn configuration file for production deployment.

Each worker process owns its own in-memory cache, so the worker count is
also the number of independent caches in front of the origin.
"""

import os

# Server socket
bind = f"{os.getenv('HOST', '0.0.0.0')}:{os.getenv('PORT', '3000')}"
backlog = 2048

# Worker processes
workers = int(os.getenv("WEB_CONCURRENCY", "1"))
worker_class = "uvicorn.workers.UvicornWorker"  # Required for FastAPI
worker_connections = 1000
timeout = 30  # Upstream calls are bounded by UPSTREAM_TIMEOUT_SECONDS well below this
graceful_timeout = 15
keepalive = int(os.getenv("TIMEOUT_KEEP_ALIVE", "30"))

# Process naming
proc_name = "calproxy"

# Logging
accesslog = os.getenv("ACCESS_LOG", "-")  # '-' means stdout
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'
errorlog = os.getenv("ERROR_LOG", "-")  # '-' means stderr
loglevel = os.getenv("LOG_LEVEL", "info").lower()
capture_output = True

# Server mechanics
daemon = False  # Don't daemonize (better for containers)
pidfile = None


# Server hooks for lifecycle management
def when_ready(server):
    """Called just after the master process is initialized."""
    server.log.info("Server is ready. Spawning workers")


def post_fork(server, worker):
    """Called just after a worker has been forked."""
    server.log.info(f"Worker spawned (pid: {worker.pid})")


def on_exit(server):
    """Called just before exiting."""
    server.log.info("Shutting down Gunicorn server")
