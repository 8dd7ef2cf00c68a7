"""
=========================================
Configuration management for DataMage.
=========================================

Loads connection and logging settings from environment variables (.env file)
and exposes a centralized Config singleton for application-wide access.

The configuration system ensures:
- Single source of truth for driver selection and credentials
- Driver-specific default ports
- A DATABASE_URL override parsed with SQLAlchemy's URL machinery
- Password-hidden URLs for log output

Example:
    >>> from core.config import config
    >>>
    >>> # Which backend and where
    >>> print(config.db.driver, config.db.render_url())
    >>>
    >>> # Keyword arguments for the DB-API connect() call
    >>> params = config.get_connection_params()
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from sqlalchemy.engine import URL, make_url

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)

SUPPORTED_DRIVERS = ('mysql', 'odbc', 'postgres')

DEFAULT_PORTS = {
    'mysql': 3306,
    'postgres': 5432,
}

# SQLAlchemy drivernames used when rendering connection URLs
URL_DRIVERNAMES = {
    'mysql': 'mysql+pymysql',
    'odbc': 'mssql+pyodbc',
    'postgres': 'postgresql+psycopg2',
}


class ConfigurationError(ValueError):
    """Exception raised when environment settings cannot be interpreted."""
    pass


@dataclass
class DatabaseConfig:
    """Database connection settings.

    Attributes:
        driver: Backend family ('mysql', 'odbc' or 'postgres')
        host: Server hostname or IP address
        port: Server port number (None for ODBC data sources)
        user: Database username
        password: Database password
        database: Database name
        schema: PostgreSQL search_path schema applied on connect
        dsn: ODBC data source name or connection string
    """

    driver: str
    host: str = 'localhost'
    port: Optional[int] = None
    user: str = ''
    password: str = ''
    database: str = ''
    schema: Optional[str] = None
    dsn: Optional[str] = None

    def __post_init__(self):
        if self.driver not in SUPPORTED_DRIVERS:
            raise ConfigurationError(
                f"Unsupported driver '{self.driver}', expected one of {', '.join(SUPPORTED_DRIVERS)}"
            )
        if self.port is None:
            self.port = DEFAULT_PORTS.get(self.driver)

    def get_url(self) -> URL:
        """Get a SQLAlchemy URL describing this connection.

        Returns:
            URL with the driver's SQLAlchemy drivername. ODBC data sources
            carry the DSN in the ``odbc_connect`` query parameter.
        """
        if self.driver == 'odbc':
            return URL.create(
                drivername=URL_DRIVERNAMES['odbc'],
                username=self.user or None,
                password=self.password or None,
                query={'odbc_connect': self.dsn or ''}
            )

        return URL.create(
            drivername=URL_DRIVERNAMES[self.driver],
            username=self.user or None,
            password=self.password or None,
            host=self.host,
            port=self.port,
            database=self.database or None
        )

    def render_url(self) -> str:
        """Render the connection URL with the password masked, for logs."""
        return self.get_url().render_as_string(hide_password=True)

    def get_connection_params(self) -> Dict[str, object]:
        """Get keyword arguments for the driver's connect() call.

        Returns:
            Dictionary shaped for the selected driver's connection factory
        """
        if self.driver == 'odbc':
            return {
                'dsn': self.dsn or '',
                'user': self.user,
                'password': self.password
            }

        params = {
            'host': self.host,
            'port': self.port,
            'user': self.user,
            'password': self.password,
            'database': self.database
        }
        if self.driver == 'postgres':
            params['schema'] = self.schema
        return params

    @classmethod
    def from_url(cls, url: str) -> 'DatabaseConfig':
        """Build settings from a single connection URL.

        Args:
            url: URL such as ``mysql+pymysql://user:pw@host/db`` or
                ``postgresql://user:pw@host:5432/db``

        Raises:
            ConfigurationError: If the URL's backend is not supported
        """
        parsed = make_url(url)
        backend = parsed.get_backend_name()

        if backend == 'mysql':
            driver = 'mysql'
        elif backend == 'postgresql':
            driver = 'postgres'
        elif backend == 'mssql' or parsed.get_driver_name() == 'pyodbc':
            driver = 'odbc'
        else:
            raise ConfigurationError(f"Unsupported DATABASE_URL backend '{backend}'")

        odbc_connect = parsed.query.get('odbc_connect')
        if isinstance(odbc_connect, tuple):
            odbc_connect = odbc_connect[0]

        return cls(
            driver=driver,
            host=parsed.host or 'localhost',
            port=parsed.port,
            user=parsed.username or '',
            password=parsed.password or '',
            database=parsed.database or '',
            schema=os.getenv('DB_SCHEMA') or None,
            dsn=odbc_connect
        )


@dataclass
class LoggingConfig:
    """Logging settings.

    Attributes:
        level: Root log level name
        log_file: Optional log file name
        log_dir: Directory for the log file
        use_colors: Colorize console output
    """

    level: str = 'INFO'
    log_file: Optional[str] = None
    log_dir: Optional[str] = None
    use_colors: bool = True


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Centralized configuration manager.

    Attributes:
        db: DatabaseConfig instance with connection settings
        logging: LoggingConfig instance with log output settings

    Example:
        >>> config = Config()
        >>> print(f"Driver {config.db_driver} at {config.db.render_url()}")
    """

    def __init__(self):
        """Initialize configuration from environment variables.

        DATABASE_URL, when present, takes precedence over the individual
        DB_* variables.
        """
        database_url = os.getenv('DATABASE_URL')
        if database_url:
            self.db = DatabaseConfig.from_url(database_url)
        else:
            port = os.getenv('DB_PORT')
            self.db = DatabaseConfig(
                driver=os.getenv('DATAMAGE_DRIVER', 'mysql').lower(),
                host=os.getenv('DB_HOST', 'localhost'),
                port=int(port) if port else None,
                user=os.getenv('DB_USER', ''),
                password=os.getenv('DB_PASSWORD', ''),
                database=os.getenv('DB_NAME', ''),
                schema=os.getenv('DB_SCHEMA') or None,
                dsn=os.getenv('ODBC_DSN') or None
            )

        self.logging = LoggingConfig(
            level=os.getenv('DATAMAGE_LOG_LEVEL', 'INFO').upper(),
            log_file=os.getenv('DATAMAGE_LOG_FILE') or None,
            log_dir=os.getenv('DATAMAGE_LOG_DIR') or None,
            use_colors=_env_bool('DATAMAGE_LOG_COLORS', True)
        )

    @property
    def db_driver(self) -> str:
        """Get the configured backend family."""
        return self.db.driver

    @property
    def db_host(self) -> str:
        """Get database server hostname."""
        return self.db.host

    @property
    def db_port(self) -> Optional[int]:
        """Get database server port number."""
        return self.db.port

    def get_connection_params(self) -> Dict[str, object]:
        """Get driver connect() keyword arguments for the configured backend."""
        return self.db.get_connection_params()


# Global configuration instance
config = Config()
