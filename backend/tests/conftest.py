import os

# Cheap bcrypt for tests; must be set before app.core.config is imported
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("APP_ENV", "test")
