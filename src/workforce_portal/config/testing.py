from .base import *  # noqa: F401,F403

SECRET_KEY = "test-secret"
JWT_SECRET = "test-jwt-secret"

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
DISABLED_FEATURES: list[str] = []
