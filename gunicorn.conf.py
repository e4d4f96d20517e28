# AssetDesk API server settings.
# gunicorn -c gunicorn.conf.py run:app
import os
import multiprocessing

bind = f"0.0.0.0:{os.environ.get('PORT', '8080')}"

workers = int(os.environ.get('WEB_CONCURRENCY', min(multiprocessing.cpu_count() * 2 + 1, 4)))
worker_class = "gthread"
threads = int(os.environ.get('GUNICORN_THREADS', 2))

# Models are imported once, before forking
preload_app = True

timeout = 60
graceful_timeout = 30
keepalive = 5

accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info")
# Last field is the id echoed back in X-Request-ID
access_log_format = '%(h)s "%(r)s" %(s)s %(b)s %(L)s %({x-request-id}o)s'

max_requests = 1000
max_requests_jitter = 50

# JSON bodies only; headers stay small
limit_request_line = 4094
limit_request_fields = 50
limit_request_field_size = 8190

forwarded_allow_ips = os.environ.get('FORWARDED_ALLOW_IPS', '127.0.0.1')
