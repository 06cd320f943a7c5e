"""
Application configuration.

Loads settings from environment variables and .env file.
The plugin configuration itself stays raw JSON here; it is validated
by the problem bounded context at startup.
"""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        plugin_configuration: Inline plugin configuration JSON.
        plugin_configuration_file: Path to a plugin configuration JSON file.
            Takes precedence over plugin_configuration when set.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "Mesh Problem Details"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    plugin_configuration: str = ""
    plugin_configuration_file: Optional[str] = None

    def load_plugin_configuration(self) -> bytes:
        """Return the raw plugin configuration bytes.

        Empty bytes mean no configuration was provided.
        """
        if self.plugin_configuration_file:
            return Path(self.plugin_configuration_file).read_bytes()
        return self.plugin_configuration.encode("utf-8")


settings = Settings()
