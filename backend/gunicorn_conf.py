# backend/gunicorn_conf.py

# Gunicorn config file for the MobileHub assistant.
# Run with: gunicorn -c gunicorn_conf.py mobilehub.main:app

from mobilehub.config.settings import settings

# Basic configuration
bind = "0.0.0.0:8000"
workers = settings.workers
worker_class = "uvicorn.workers.UvicornWorker"
timeout = 60

# Settings for running behind a reverse proxy like Nginx
forwarded_allow_ips = "*"

# --- Logging ---
# Send access and error logs to stdout and stderr
accesslog = "-"
errorlog = "-"
loglevel = settings.log_level.lower()
