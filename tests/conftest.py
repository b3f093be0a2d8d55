"""
Test environment. Settings are read once at import time, so these variables
must be in place before anything under app/ is imported.

DATABASE_URL=sqlite:// gives one in-memory database shared by every session
(StaticPool), which the API tests create and drop per test case.
"""

import os

os.environ["APP_ENV"] = "dev"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_ACCESS_SECRET"] = "test-access-secret-0123456789abcdefghijkl"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret-0123456789abcdefghijk"
os.environ["RATE_LIMIT_ENABLED"] = "false"
# Lowest bcrypt cost keeps the suite fast.
os.environ["PASSWORD_BCRYPT_ROUNDS"] = "4"
os.environ["REFRESH_TOKEN_BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"
