"""
Production settings for hrms_project.
Loads sensitive values from .env file for security.
"""

from .settings import *  # noqa: F401,F403
from .settings import BASE_DIR, LOGGING, LOG_LEVEL

# Load .env file (simple method - no extra library needed)
env_file = BASE_DIR / '.env'

# Read .env file into a dictionary
env_vars = {}
if env_file.exists():
    with open(env_file) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#') and '=' in line:
                key, value = line.split('=', 1)
                env_vars[key.strip()] = value.strip().strip('"').strip("'")

# ============================================
# SETTINGS LOADED FROM .env FILE
# ============================================
SECRET_KEY = env_vars.get('SECRET_KEY', 'change-me-in-env-file')
ALLOWED_HOSTS = env_vars.get('ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')
DB_PASSWORD = env_vars.get('DB_PASSWORD', 'change-me-in-env-file')

# ============================================
# DATABASE SETTINGS
# ============================================
DB_NAME = env_vars.get('DB_NAME', 'hrms_db')
DB_USER = env_vars.get('DB_USER', 'hrms_user')
DB_HOST = env_vars.get('DB_HOST', 'localhost')
DB_PORT = env_vars.get('DB_PORT', '3306')

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.mysql',
        'NAME': DB_NAME,
        'USER': DB_USER,
        'PASSWORD': DB_PASSWORD,
        'HOST': DB_HOST,
        'PORT': DB_PORT,
        'OPTIONS': {
            'charset': 'utf8mb4',
            'init_command': "SET sql_mode='STRICT_TRANS_TABLES'",
        },
    }
}

LOG_LEVEL = env_vars.get('HRMS_LOG_LEVEL', LOG_LEVEL)
for _logger in LOGGING['loggers'].values():
    _logger['level'] = LOG_LEVEL
