"""
Configuration Management

Unified configuration for the reports service: database connection, logging,
web server, session-cookie authentication and report defaults. Values come
from an optional .config.json file with MES_* environment variable overrides.
"""

import os
import json
import logging
import secrets
from pathlib import Path
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


class Environment(Enum):
    """Supported environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(Enum):
    """Supported log levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class DatabaseConfig:
    """Database configuration with connection settings"""
    # Database type: 'sqlite' or 'postgresql'
    db_type: str = "sqlite"

    # SQLite settings
    path: Path = field(default_factory=lambda: Path("data/database/mes.db"))
    journal_mode: str = "WAL"

    # PostgreSQL settings
    postgresql_host: str = "localhost"
    postgresql_port: int = 5432
    postgresql_database: str = "mes"
    postgresql_username: str = "postgres"
    postgresql_password: str = ""

    # Common settings
    connection_timeout: int = 30


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: LogLevel = LogLevel.INFO
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    logs_dir: Path = field(default_factory=lambda: Path("data/logs"))
    file_rotation_size: int = 10 * 1024 * 1024  # 10MB
    file_retention_count: int = 5
    enable_console: bool = True
    enable_file: bool = False


@dataclass
class WebConfig:
    """Web interface configuration"""
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False
    log_level: str = "info"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class AuthConfig:
    """Session cookie and role configuration"""
    # Signing secret comes from the environment only, never from .config.json
    jwt_secret: str = field(default_factory=lambda: os.getenv(
        'MES_JWT_SECRET',
        secrets.token_hex(32)
    ))
    jwt_algorithm: str = "HS256"
    cookie_name: str = "auth_token"
    token_ttl_hours: int = 8

    # Roles allowed to open the "all entries" reports and global search
    report_roles: List[str] = field(default_factory=lambda: ["ADMIN", "SUPERVISOR", "MANAGER"])
    # Roles that may read entries belonging to other employees
    admin_roles: List[str] = field(default_factory=lambda: ["ADMIN"])


@dataclass
class ReportConfig:
    """Report query defaults"""
    default_window_days: int = 30
    max_page: int = 1_000_000
    query_workers: int = 3


class UnifiedConfig:
    """
    Central configuration management system
    Implements singleton pattern and environment-aware configuration
    Loads from .config.json file with environment variable overrides
    """

    _instance: Optional['UnifiedConfig'] = None
    _initialized: bool = False
    _config_file = Path(os.getenv('MES_CONFIG_FILE', '.config.json'))
    _json_config: Optional[Dict[str, Any]] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._load_json_config()

        env_mode = self._get_config_value('environment', 'mode', default='development')
        if not env_mode or not isinstance(env_mode, str):
            env_mode = 'development'
        env_var = os.getenv('MES_ENVIRONMENT')
        if env_var:
            env_mode = env_var
        try:
            self.environment = Environment(env_mode.lower())
        except ValueError:
            logging.getLogger(__name__).warning(f"Unknown environment '{env_mode}', using development")
            self.environment = Environment.DEVELOPMENT

        self.database = self._load_database_config()
        self.logging = self._load_logging_config()
        self.web = self._load_web_config()
        self.auth = self._load_auth_config()
        self.reports = self._load_report_config()

        self._initialized = True

    def _load_json_config(self):
        """Load configuration from .config.json file"""
        if self._config_file.exists():
            try:
                with open(self._config_file, 'r', encoding='utf-8') as f:
                    self._json_config = json.load(f)
                logging.getLogger(__name__).info(f"Loaded configuration from {self._config_file}")
            except (json.JSONDecodeError, IOError) as e:
                logging.getLogger(__name__).warning(f"Error loading {self._config_file}: {e}. Using defaults.")
                self._json_config = None
        else:
            logging.getLogger(__name__).debug(f"Config file {self._config_file} not found. Using defaults.")
            self._json_config = None

    def _get_config_value(self, *keys, default=None):
        """
        Get a value from JSON config using nested keys
        Example: _get_config_value('database', 'sqlite', 'path', default='data/database/mes.db')
        """
        if not self._json_config:
            return default

        value = self._json_config
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        # Skip documentation keys (keys starting with _)
        if isinstance(value, dict):
            return {k: v for k, v in value.items() if not k.startswith('_')} if value else default

        return value if value is not None else default

    def _load_database_config(self) -> DatabaseConfig:
        """Load database configuration from JSON and environment overrides"""
        config = DatabaseConfig()

        db_type = self._get_config_value('database', 'type', default='sqlite')
        config.db_type = os.getenv('MES_DATABASE_TYPE', db_type)

        if config.db_type == 'sqlite':
            sqlite_path = self._get_config_value('database', 'sqlite', 'path', default='data/database/mes.db')
            config.path = Path(os.getenv('MES_DATABASE_PATH', sqlite_path))
            config.journal_mode = self._get_config_value('database', 'sqlite', 'journal_mode', default='WAL')
        elif config.db_type == 'postgresql':
            pg_config = self._get_config_value('database', 'postgresql', default={})
            config.postgresql_host = os.getenv('MES_POSTGRESQL_HOST', pg_config.get('host', 'localhost'))
            config.postgresql_port = int(os.getenv('MES_POSTGRESQL_PORT', str(pg_config.get('port', 5432))))
            config.postgresql_database = os.getenv('MES_POSTGRESQL_DATABASE', pg_config.get('database', 'mes'))
            config.postgresql_username = os.getenv('MES_POSTGRESQL_USERNAME', pg_config.get('username', 'postgres'))
            config.postgresql_password = os.getenv('MES_POSTGRESQL_PASSWORD', pg_config.get('password', ''))

        common_config = self._get_config_value('database', 'common', default={})
        config.connection_timeout = int(os.getenv('MES_DATABASE_TIMEOUT', str(common_config.get('connection_timeout', 30))))

        return config

    def _load_logging_config(self) -> LoggingConfig:
        """Load logging configuration from JSON and environment overrides"""
        log_config = self._get_config_value('logging', default={})
        config = LoggingConfig()

        log_level = os.getenv('MES_LOG_LEVEL', log_config.get('level', 'INFO'))
        try:
            config.level = LogLevel(log_level.upper())
        except ValueError:
            config.level = LogLevel.INFO

        config.format = os.getenv('MES_LOG_FORMAT', log_config.get('format', config.format))
        config.date_format = log_config.get('date_format', config.date_format)
        config.logs_dir = Path(os.getenv('MES_LOGS_DIR', log_config.get('logs_dir', 'data/logs')))
        rotation_mb = log_config.get('file_rotation_size_mb', 10)
        config.file_rotation_size = rotation_mb * 1024 * 1024
        config.file_retention_count = log_config.get('file_retention_count', 5)
        config.enable_console = log_config.get('enable_console', True)
        config.enable_file = log_config.get('enable_file', False)

        # Adjust for environment
        if self.environment == Environment.DEVELOPMENT:
            config.level = LogLevel.DEBUG
        elif self.environment == Environment.PRODUCTION:
            config.enable_file = True

        return config

    def _load_web_config(self) -> WebConfig:
        """Load web configuration from JSON and environment overrides"""
        web_config = self._get_config_value('web', default={})
        config = WebConfig()

        config.host = os.getenv('MES_WEB_HOST', web_config.get('host', '0.0.0.0'))
        config.port = int(os.getenv('MES_WEB_PORT', str(web_config.get('port', 8000))))
        config.reload = web_config.get('reload', False)
        config.log_level = os.getenv('MES_WEB_LOG_LEVEL', web_config.get('log_level', 'info'))
        config.cors_origins = web_config.get('cors_origins', ['*'])

        if self.environment == Environment.DEVELOPMENT:
            config.reload = True
            config.log_level = "debug"

        return config

    def _load_auth_config(self) -> AuthConfig:
        """Load session/role configuration from JSON and environment overrides"""
        auth_config = self._get_config_value('auth', default={})
        config = AuthConfig()

        config.jwt_algorithm = auth_config.get('jwt_algorithm', config.jwt_algorithm)
        config.cookie_name = os.getenv('MES_COOKIE_NAME', auth_config.get('cookie_name', config.cookie_name))
        config.token_ttl_hours = int(auth_config.get('token_ttl_hours', config.token_ttl_hours))

        report_roles = auth_config.get('report_roles')
        if report_roles:
            config.report_roles = [str(r).upper() for r in report_roles]
        admin_roles = auth_config.get('admin_roles')
        if admin_roles:
            config.admin_roles = [str(r).upper() for r in admin_roles]

        return config

    def _load_report_config(self) -> ReportConfig:
        """Load report defaults from JSON"""
        report_config = self._get_config_value('reports', default={})
        config = ReportConfig()

        config.default_window_days = int(report_config.get('default_window_days', config.default_window_days))
        config.max_page = int(report_config.get('max_page', config.max_page))
        config.query_workers = int(report_config.get('query_workers', config.query_workers))

        return config

    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment == Environment.DEVELOPMENT

    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment == Environment.PRODUCTION

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for serialization (no secrets)"""
        return {
            'environment': self.environment.value,
            'database': {
                'type': self.database.db_type,
                'path': str(self.database.path),
                'connection_timeout': self.database.connection_timeout
            },
            'web': {
                'host': self.web.host,
                'port': self.web.port,
                'reload': self.web.reload
            },
            'auth': {
                'cookie_name': self.auth.cookie_name,
                'report_roles': list(self.auth.report_roles),
                'admin_roles': list(self.auth.admin_roles)
            },
            'reports': {
                'default_window_days': self.reports.default_window_days,
                'query_workers': self.reports.query_workers
            }
        }


# Global configuration instance (singleton)
config = UnifiedConfig()


def get_config() -> UnifiedConfig:
    """Get the global configuration instance"""
    return config


def setup_logging():
    """Setup logging configuration based on current config"""
    import logging.handlers
    from datetime import datetime

    log_config = config.logging
    root_logger = logging.getLogger()

    logging.basicConfig(
        level=getattr(logging, log_config.level.value),
        format=log_config.format,
        datefmt=log_config.date_format,
        force=True
    )

    if log_config.enable_file:
        log_config.logs_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_config.logs_dir / f"mes_{datetime.now().strftime('%Y%m%d')}.log"

        existing_file_handler = None
        for handler in root_logger.handlers:
            if isinstance(handler, logging.handlers.RotatingFileHandler):
                if handler.baseFilename == str(log_file.resolve()):
                    existing_file_handler = handler
                    break

        if existing_file_handler is None:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=log_config.file_rotation_size,
                backupCount=log_config.file_retention_count
            )
            file_handler.setFormatter(logging.Formatter(log_config.format, log_config.date_format))
            root_logger.addHandler(file_handler)

    # Disable console logging in production if configured
    if not log_config.enable_console and config.is_production():
        root_logger.handlers = [h for h in root_logger.handlers
                                if isinstance(h, logging.FileHandler)
                                or not isinstance(h, logging.StreamHandler)]
