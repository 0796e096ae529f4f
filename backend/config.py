import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Store backend: 'redis' (default) or 'memory' for local development
    STORE_BACKEND = os.environ.get('STORE_BACKEND', 'redis')
    REDIS_ADDR = os.environ.get('REDIS_ADDR')
    REDIS_PASSWORD = os.environ.get('REDIS_PASSWORD', '')
    REDIS_DB = int(os.environ.get('REDIS_DB', '0'))
    # Deadline applied to every store call (seconds)
    REDIS_TIMEOUT_SEC = float(os.environ.get('REDIS_TIMEOUT_SEC', '5'))
    # Batch hint for SCAN when listing records
    REDIS_SCAN_COUNT = int(os.environ.get('REDIS_SCAN_COUNT', '500'))
    # Namespace for record keys. Empty string keeps raw usernames as keys.
    RECORD_KEY_PREFIX = os.environ.get('RECORD_KEY_PREFIX', 'user:')
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', '*').split(',') if o.strip()]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    PORT = int(os.environ.get('PORT', '3000'))
