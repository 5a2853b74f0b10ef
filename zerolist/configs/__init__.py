#!/usr/bin/env python

"""
    Configurations for zerolist

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import os


# Determine environment
TESTING = os.getenv("TESTING", "false").lower() == "true"

# API server configuration
SCHEME = 'http'
HOST = os.environ.get('ZEROLIST_HOST', 'localhost')
PORT = int(os.environ.get('ZEROLIST_PORT', 8787))
WORKERS = int(os.environ.get('ZEROLIST_WORKERS', 1))
DEBUG = bool(int(os.environ.get('ZEROLIST_DEBUG', 0)))
LOG_LEVEL = os.environ.get('ZEROLIST_LOG_LEVEL', 'info')
SSL_CRT = os.environ.get('ZEROLIST_SSL_CRT')
SSL_KEY = os.environ.get('ZEROLIST_SSL_KEY')

# Public URL used in email links, falls back to the request's origin
BASE_URL = os.environ.get('BASE_URL', '').rstrip('/')

# Honour CF-Connecting-IP and X-Forwarded-For only when a proxy sets them
TRUST_PROXY_HEADERS = os.environ.get('ZEROLIST_TRUST_PROXY_HEADERS', 'false').lower() == 'true'

# Dashboard origins allowed to call the admin API cross-origin
ADMIN_ORIGINS = [
    o.strip() for o in os.environ.get(
        'ADMIN_ORIGINS', 'http://localhost:5173').split(',') if o.strip()
]

# Blocks every write when set
DEMO_MODE = os.environ.get('ZEROLIST_DEMO_MODE', 'false').lower() == 'true'

# Transactional email (Resend)
RESEND_API_KEY = os.environ.get('RESEND_API_KEY')
RESEND_FROM_EMAIL = os.environ.get('RESEND_FROM_EMAIL')
RESEND_API_URL = os.environ.get('RESEND_API_URL', 'https://api.resend.com/emails')
HTTP_TIMEOUT = int(os.environ.get('ZEROLIST_HTTP_TIMEOUT', 10))
HTTP_HEADERS = {"User-Agent": "zerolist/1.0"}

# Cloudflare Access (admin auth). Auth is disabled when either is unset.
CF_ACCESS_TEAM_DOMAIN = os.environ.get('CF_ACCESS_TEAM_DOMAIN', '').rstrip('/')
CF_ACCESS_AUD = os.environ.get('CF_ACCESS_AUD')

OPTIONS = {
    'host': HOST,
    'port': PORT,
    'log_level': LOG_LEVEL,
    'reload': DEBUG,
    'workers': WORKERS,
}
if SSL_CRT and SSL_KEY:
    OPTIONS['ssl_keyfile'] = SSL_KEY
    OPTIONS['ssl_certfile'] = SSL_CRT
    SCHEME = 'https'

DB_CONFIG = {
    'user': os.environ.get('DB_USER', 'postgres'),
    'password': os.environ.get('DB_PASSWORD'),
    'host': os.environ.get('DB_HOST', 'localhost'),
    'port': int(os.environ.get('DB_PORT', '5432')),
    'dbname': os.environ.get('DB_NAME', 'zerolist'),
}

# Database configuration
DB_URI = (
    "sqlite:///:memory:" if TESTING else
    os.environ.get('ZEROLIST_DB_URI') or
    'postgresql+psycopg2://{user}:{password}@{host}:{port}/{dbname}'.format(**DB_CONFIG)
)

__all__ = [
    'SCHEME', 'HOST', 'PORT', 'DEBUG', 'OPTIONS', 'DB_URI', 'DB_CONFIG',
    'TESTING', 'BASE_URL', 'DEMO_MODE', 'RESEND_API_KEY', 'RESEND_FROM_EMAIL',
    'CF_ACCESS_TEAM_DOMAIN', 'CF_ACCESS_AUD', 'ADMIN_ORIGINS',
]
