from contextlib import contextmanager
from typing import Any, Generator
from app.core.config import settings
from app.core.exceptions import ConfigurationError


class DatabaseManager:
    def __init__(self):
        self.connection_string = (
            f"DRIVER={{{settings.db_driver}}};"
            f"SERVER={settings.db_server};"
            f"DATABASE={settings.db_name};"
            f"UID={settings.db_user};"
            f"PWD={settings.db_password};"
            f"TrustServerCertificate=yes;"
        )
        self.login_timeout = settings.db_login_timeout
        self.query_timeout = settings.db_query_timeout

    def is_configured(self) -> bool:
        return bool(settings.db_server and settings.db_name)

    def ensure_configured(self) -> None:
        if not self.is_configured():
            raise ConfigurationError("Server configuration error: DB_SERVER and DB_NAME must be set")

    @contextmanager
    def get_connection(self, autocommit: bool = False) -> Generator[Any, None, None]:
        """Get database connection with automatic cleanup"""
        # Imported on first use: the driver needs the unixODBC runtime.
        import pyodbc

        self.ensure_configured()
        connection = None
        try:
            connection = pyodbc.connect(
                self.connection_string,
                autocommit=autocommit,
                timeout=self.login_timeout,
            )
            # Per-statement timeout so a stalled call fails instead of hanging the run
            connection.timeout = self.query_timeout
            yield connection
        finally:
            if connection:
                connection.close()

    def test_connection(self) -> bool:
        """Test database connection"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT 1")
                return True
        except Exception:
            return False


db_manager = DatabaseManager()
