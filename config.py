"""Configuration management for the ChemKG Explorer.

This module provides centralized configuration management for the ChemKG Explorer
service. It handles environment variable parsing, configuration validation, and
provides a unified interface for accessing application settings.

The configuration supports:
    - GraphDB repository configuration with inference and timeout settings
    - Flask web server configuration
    - Query result limits for the pathway explorer
    - Feature flags for optional functionality
    - Validation of all settings

Environment Variables:
    GRAPHDB_BASE_URL: Base URL of the GraphDB server (default: http://localhost:7200)
    GRAPHDB_REPOSITORY: Repository holding the reaction graph (default: chemkg)
    GRAPHDB_INFER: Enable GraphDB inference for queries (default: True)
    SPARQL_TIMEOUT_MS: Default query timeout in milliseconds (default: 30000)
    PATHWAY_TIMEOUT_MS: Timeout for dashboard and pathway queries in milliseconds (default: 60000)
    CHEMKG_NAMESPACE: Namespace IRI of the ck: vocabulary (default: http://example.org/chemkg#)
    PATH_RESULT_LIMIT: Row limit for path summary queries (default: 200)
    LOG_LEVEL: Logging verbosity level (default: INFO)
    FLASK_HOST: Flask host binding (default: 0.0.0.0)
    FLASK_PORT: Flask port number (default: 5000)
    FLASK_DEBUG: Enable Flask debug mode (default: False)
    ENABLE_HEALTH_CHECK: Enable the health check endpoint (default: True)
    ENABLE_MOCK_FALLBACK: Serve bundled sample data when GraphDB fails (default: True)
    ENABLE_PERFORMANCE_LOGGING: Log query execution times (default: True)

Example:
    >>> from config import Config
    >>> print(Config.GRAPHDB_REPOSITORY)
    chemkg
    >>> Config.repository_endpoint()
    'http://localhost:7200/repositories/chemkg'
"""
import logging
import os
from typing import Any, Dict, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


class Config:
    """Application configuration class with environment variable management.

    All configuration values are class attributes loaded once from environment
    variables with sensible defaults. Tests and callers may override them
    directly on the class.

    Attributes:
        GRAPHDB_BASE_URL (str): Base URL of the GraphDB server
        GRAPHDB_REPOSITORY (str): Repository id queried by every service
        GRAPHDB_INFER (bool): Whether GraphDB should apply inference
        SPARQL_TIMEOUT_MS (int): Default query timeout in milliseconds
        PATHWAY_TIMEOUT_MS (int): Timeout for dashboard and pathway queries
        CHEMKG_NAMESPACE (str): Namespace bound to the ck: prefix
        PATH_RESULT_LIMIT (int): LIMIT applied to path summary queries
        LOG_LEVEL (str): Logging verbosity level
        FLASK_HOST (str): Host address for Flask web server binding
        FLASK_PORT (int): Port number for Flask web server
        FLASK_DEBUG (bool): Whether to enable Flask debug mode
        ENABLE_HEALTH_CHECK (bool): Whether to enable the health endpoint
        ENABLE_MOCK_FALLBACK (bool): Whether to serve sample data on failures
        ENABLE_PERFORMANCE_LOGGING (bool): Whether to log query timings
    """

    # GraphDB Configuration
    GRAPHDB_BASE_URL = os.getenv("GRAPHDB_BASE_URL", "http://localhost:7200")
    GRAPHDB_REPOSITORY = os.getenv("GRAPHDB_REPOSITORY", "chemkg")
    GRAPHDB_INFER = os.getenv("GRAPHDB_INFER", "True").lower() == "true"
    SPARQL_TIMEOUT_MS = int(os.getenv("SPARQL_TIMEOUT_MS", "30000"))
    PATHWAY_TIMEOUT_MS = int(os.getenv("PATHWAY_TIMEOUT_MS", "60000"))

    # Vocabulary Configuration
    CHEMKG_NAMESPACE = os.getenv("CHEMKG_NAMESPACE", "http://example.org/chemkg#")
    PATH_RESULT_LIMIT = int(os.getenv("PATH_RESULT_LIMIT", "200"))

    # Logging Configuration
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Flask Configuration
    FLASK_HOST = os.getenv("FLASK_HOST", "0.0.0.0")
    FLASK_PORT = int(os.getenv("FLASK_PORT", "5000"))
    FLASK_DEBUG = os.getenv("FLASK_DEBUG", "False").lower() == "true"

    # Feature Flags
    ENABLE_HEALTH_CHECK = os.getenv("ENABLE_HEALTH_CHECK", "True").lower() == "true"
    ENABLE_MOCK_FALLBACK = os.getenv("ENABLE_MOCK_FALLBACK", "True").lower() == "true"
    ENABLE_PERFORMANCE_LOGGING = os.getenv("ENABLE_PERFORMANCE_LOGGING", "True").lower() == "true"

    @classmethod
    def repository_endpoint(cls, repository: Optional[str] = None) -> str:
        """Return the SPARQL endpoint URL of a GraphDB repository.

        Args:
            repository (str, optional): Repository id. Defaults to GRAPHDB_REPOSITORY.

        Returns:
            str: ``{GRAPHDB_BASE_URL}/repositories/{repository}``
        """
        base = cls.GRAPHDB_BASE_URL.rstrip("/")
        return f"{base}/repositories/{repository or cls.GRAPHDB_REPOSITORY}"

    @classmethod
    def get_config_dict(cls) -> Dict[str, Any]:
        """Get all configuration settings as a dictionary.

        Returns:
            Dict[str, Any]: Dictionary mapping configuration parameter names to their
                values. Only uppercase attributes (actual settings) are included.

        Example:
            >>> config = Config.get_config_dict()
            >>> print(config['GRAPHDB_REPOSITORY'])
            chemkg
        """
        return {
            key: getattr(cls, key)
            for key in dir(cls)
            if not key.startswith('_') and key.isupper()
        }

    @classmethod
    def validate_config(cls) -> bool:
        """Validate all configuration settings for correctness.

        Validation checks:
            - GraphDB base URL format and scheme
            - Non-empty repository id
            - Positive timeouts and result limit
            - Port number range (1-65535)
            - Known logging level name

        Returns:
            bool: True if all settings are valid, False otherwise. Validation
                errors are logged rather than raised so the method is safe to
                call during application startup.
        """
        try:
            parsed_url = urlparse(cls.GRAPHDB_BASE_URL)
            if parsed_url.scheme not in ("http", "https") or not parsed_url.netloc:
                raise ValueError(f"Invalid GraphDB base URL: {cls.GRAPHDB_BASE_URL}")
            if not cls.GRAPHDB_REPOSITORY.strip():
                raise ValueError("GRAPHDB_REPOSITORY must not be empty")

            if cls.SPARQL_TIMEOUT_MS <= 0:
                raise ValueError("SPARQL_TIMEOUT_MS must be positive")
            if cls.PATHWAY_TIMEOUT_MS <= 0:
                raise ValueError("PATHWAY_TIMEOUT_MS must be positive")
            if cls.PATH_RESULT_LIMIT <= 0:
                raise ValueError("PATH_RESULT_LIMIT must be positive")
            if cls.FLASK_PORT <= 0 or cls.FLASK_PORT > 65535:
                raise ValueError("FLASK_PORT must be between 1 and 65535")
            if not isinstance(logging.getLevelName(cls.LOG_LEVEL.upper()), int):
                raise ValueError(f"Unknown LOG_LEVEL: {cls.LOG_LEVEL}")

            return True

        except ValueError as e:
            logger.error(f"Configuration validation failed: {str(e)}")
            return False
