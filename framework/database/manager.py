from typing import Optional
from .sql_driver import SQLDriver

class DatabaseManager:
    _instance = None

    def __init__(self, settings=None, driver: Optional[SQLDriver] = None):
        if driver is None:
            driver = SQLDriver(
                settings.DATABASE_URL,
                connect_timeout=settings.DB_CONNECT_TIMEOUT,
                pool_timeout=settings.DB_POOL_TIMEOUT,
            )
        self.sql = driver

    @classmethod
    def get_instance(cls, settings=None):
        if cls._instance is None:
            if settings is None:
                from framework.config import settings as app_settings
                settings = app_settings
            cls._instance = cls(settings)
        return cls._instance

    @classmethod
    def reset_instance(cls):
        cls._instance = None
