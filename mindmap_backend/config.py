"""
Backend configuration, read from MINDMAP_* environment variables.
"""

import logging
import os

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = ["http://localhost:5173", "http://localhost:3000", "http://127.0.0.1:5173"]


def _env_number(env, name: str, convert):
    """Parse a numeric variable; invalid values are logged and ignored."""
    raw = env.get(name)
    if not raw:
        return None
    try:
        return convert(raw)
    except ValueError as exc:
        logger.warning("Invalid %s, using default: %s", name, exc)
        return None


class Settings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8765
    cors_origins: list[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    # New topics without coordinates are placed in [-r, r) on both axes
    spawn_radius: float = 250.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Build settings from the environment, ignoring unset variables."""
        env = os.environ if environ is None else environ
        values: dict = {}

        if env.get("MINDMAP_HOST"):
            values["host"] = env["MINDMAP_HOST"]
        port = _env_number(env, "MINDMAP_PORT", int)
        if port is not None:
            values["port"] = port
        if env.get("MINDMAP_CORS_ORIGINS"):
            values["cors_origins"] = [
                o.strip() for o in env["MINDMAP_CORS_ORIGINS"].split(",") if o.strip()
            ]
        spawn_radius = _env_number(env, "MINDMAP_SPAWN_RADIUS", float)
        if spawn_radius is not None:
            values["spawn_radius"] = spawn_radius
        if env.get("MINDMAP_LOG_LEVEL"):
            values["log_level"] = env["MINDMAP_LOG_LEVEL"].upper()

        return cls(**values)


def configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.log_level, None)
    if not isinstance(level, int):
        logger.warning("Invalid MINDMAP_LOG_LEVEL %r, using INFO", settings.log_level)
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


settings = Settings.from_env()
