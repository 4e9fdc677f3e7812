import os

# Point the module-level engine at an in-memory database before app modules import.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_ENV", "dev")
