from functools import lru_cache
import logging
import sys
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing or invalid."""
    pass


class Settings(BaseSettings):
    """Application configuration pulled from environment variables or .env file."""

    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False
    log_level: str = "INFO"

    # CPU counters
    proc_stat_path: str = "/proc/stat"
    cpu_sample_delay_seconds: float = 0.05

    # Disk usage report
    disk_command: str = "df -h"
    disk_device_prefix: str = "/dev/nvme"
    disk_root_mount: str = "/"

    # External tools
    network_command: str = "sar -n DEV 1 1"
    docker_command: str = (
        'docker ps --format "table {{.ID}}\\t{{.Names}}\\t{{.Image}}\\t{{.Status}}\\t{{.Ports}}"'
    )
    gpu_command: str = (
        "nvidia-smi --query-gpu=power.draw,power.limit,utilization.gpu,memory.used,memory.total "
        "--format=csv,nounits,noheader"
    )
    # 0 disables the timeout
    command_timeout_seconds: float = 10.0

    # CORS settings
    # Comma-separated list of allowed origins, or "*" for all
    cors_allowed_origins: str = "*"

    # Environment (development, staging, production)
    environment: str = "development"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="allow")

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()

    @property
    def command_timeout(self) -> float | None:
        return self.command_timeout_seconds if self.command_timeout_seconds > 0 else None

    def validate_required(self) -> list[str]:
        """Validate configuration settings.

        Returns a list of error messages for invalid settings.
        """
        errors: list[str] = []
        warnings: list[str] = []

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"LOG_LEVEL must be one of {sorted(VALID_LOG_LEVELS)}, got {self.log_level!r}")

        if not 0 < self.port < 65536:
            errors.append(f"PORT must be between 1 and 65535, got {self.port}")

        if self.cpu_sample_delay_seconds < 0:
            errors.append("CPU_SAMPLE_DELAY_SECONDS must not be negative")
        elif self.cpu_sample_delay_seconds > 5:
            warnings.append(
                f"CPU_SAMPLE_DELAY_SECONDS is {self.cpu_sample_delay_seconds}s, every poll will wait that long"
            )

        if self.command_timeout_seconds < 0:
            errors.append("COMMAND_TIMEOUT_SECONDS must not be negative (use 0 to disable)")
        elif self.command_timeout_seconds == 0:
            warnings.append("COMMAND_TIMEOUT_SECONDS is 0, a hung external command will block polls")

        for name in ("disk_command", "network_command", "docker_command", "gpu_command"):
            if not getattr(self, name).strip():
                errors.append(f"{name.upper()} is required but not set")

        if not self.disk_device_prefix:
            errors.append("DISK_DEVICE_PREFIX is required but not set")

        if not self.proc_stat_path:
            warnings.append("PROC_STAT_PATH not set, CPU sampling will use the per-core fallback")

        if self.environment.lower() == "production" and self.cors_allowed_origins.strip() == "*":
            warnings.append(
                "CORS_ALLOWED_ORIGINS is set to '*' (allow all) in production. "
                "Set specific allowed origins if the dashboard is exposed."
            )

        # Log warnings
        for warning in warnings:
            logger.warning(f"Config warning: {warning}")

        return errors


def validate_config_on_startup(settings: Settings) -> None:
    """Validate configuration and raise if settings are invalid."""
    errors = settings.validate_required()

    if errors:
        logger.error("Configuration validation failed:")
        for error in errors:
            logger.error(f"  - {error}")
        print("\nConfiguration Error:", file=sys.stderr)
        print("The following settings are missing or invalid:", file=sys.stderr)
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        print("\nPlease check your .env file or environment variables.", file=sys.stderr)
        raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

    logger.info("Configuration validated successfully")


@lru_cache
def get_settings() -> Settings:
    return Settings()
