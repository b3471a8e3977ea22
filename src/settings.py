"""
Service settings.  Values come from the environment, or from a .env file in the working directory.  Command line
options given to the app override them.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8080
    API_TOKEN: str = ""

    WG_CONFIG_FILE: str = "/etc/wireguard/wg0.conf"
    WG_PARAMS_FILE: str = "/etc/wireguard/params"
    WIREGUARD_CLIENTS: str = "/home/wireguard/users"

    # Seconds before a wg / wg-quick invocation is abandoned
    COMMAND_TIMEOUT: float = 30.0
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )
