"""
GRAPHWIRE - Configuration

Centralized configuration for the wiring engine.
Uses environment variables with sensible defaults.
"""
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from observability.logging import LoggingConfig
from observability.tracing import TracingConfig

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Deployment environments."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


def _optional_float(name: str, default: str) -> Optional[float]:
    value = float(os.getenv(name, default))
    return value if value > 0 else None


@dataclass
class ContainerConfig:
    """Container and service locator behaviour."""
    # Seconds before a still-running component initialization is reported; None disables
    init_warning_timeout: Optional[float] = field(
        default_factory=lambda: _optional_float("GRAPHWIRE_INIT_WARNING_TIMEOUT", "3")
    )


@dataclass
class GraphwireConfig:
    """Main configuration class combining all sub-configs."""
    env: Environment = field(
        default_factory=lambda: Environment(os.getenv("GRAPHWIRE_ENVIRONMENT", "development"))
    )
    debug: bool = field(default_factory=lambda: os.getenv("GRAPHWIRE_DEBUG", "false").lower() == "true")

    # Sub-configurations
    container: ContainerConfig = field(default_factory=ContainerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == Environment.PRODUCTION

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "env": self.env.value,
            "debug": self.debug,
            "container": {
                "init_warning_timeout": self.container.init_warning_timeout,
            },
            "logging": {
                "level": self.logging.level,
                "json_format": self.logging.json_format,
            },
            "tracing": {
                "enabled": self.tracing.enabled,
                "console_export": self.tracing.console_export,
            },
        }


# Singleton configuration instance
_config: Optional[GraphwireConfig] = None


def get_config() -> GraphwireConfig:
    """Get or create configuration singleton."""
    global _config
    if _config is None:
        _config = GraphwireConfig()
    return _config


def reload_config() -> GraphwireConfig:
    """Reload configuration from environment."""
    global _config
    load_dotenv(override=True)
    _config = GraphwireConfig()
    return _config
