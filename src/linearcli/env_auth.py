"""Environment-based authentication for linear-cli.

The Linear API key is read from the process environment; when it is absent,
the first dotfile found among the candidate locations is loaded with
python-dotenv (without overriding variables that are already set).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .errors import MissingCredentialError
from .logging import get_logger

API_KEY_VAR = "LINEAR_API_KEY"
DOTENV_OVERRIDE_VAR = "LINEAR_CLI_DOTENV"
API_SETTINGS_URL = "https://linear.app/settings/api"


def default_dotenv_paths() -> list[Path]:
    paths: list[Path] = []
    override = os.getenv(DOTENV_OVERRIDE_VAR)
    if override:
        paths.append(Path(override).expanduser())
    paths.append(Path(".env"))
    paths.append(Path.home() / ".config" / "linear-cli" / ".env")
    return paths


@dataclass
class EnvAuthConfig:
    """Configuration for environment-based authentication."""

    load_dotenv: bool = True
    dotenv_path: str | None = None
    api_key_var: str = API_KEY_VAR


class EnvironmentAuthManager:
    """Finds the API key in environment variables and .env files."""

    def __init__(self, config: EnvAuthConfig):
        self.config = config
        self.logger = get_logger()
        self.dotenv_loaded: Path | None = None

    def _candidate_paths(self) -> list[Path]:
        if self.config.dotenv_path:
            return [Path(self.config.dotenv_path)]
        return default_dotenv_paths()

    def _load_dotenv(self) -> None:
        for env_path in self._candidate_paths():
            if env_path.is_file():
                load_dotenv(str(env_path), override=False)
                self.dotenv_loaded = env_path
                self.logger.debug(f"Loaded environment variables from {env_path}")
                return

    def get_api_key(self) -> str | None:
        key = os.getenv(self.config.api_key_var)
        if key:
            return key.strip()
        if self.config.load_dotenv and self.dotenv_loaded is None:
            self._load_dotenv()
            key = os.getenv(self.config.api_key_var)
            if key:
                self.logger.debug(f"Found {self.config.api_key_var} in {self.dotenv_loaded}")
                return key.strip()
        return None

    def require_api_key(self) -> str:
        key = self.get_api_key()
        if not key:
            raise MissingCredentialError(
                f"{self.config.api_key_var} not found",
                details=self.get_authentication_recommendations(),
            )
        return key

    def get_authentication_recommendations(self) -> list[str]:
        var = self.config.api_key_var
        dotenv_target = self._candidate_paths()[-1]
        return [
            "Please provide your Linear API key in one of these ways:",
            "",
            "1. Environment variable:",
            f'   export {var}="your-api-key"',
            "",
            "2. Create a .env file:",
            f"   echo '{var}=your-api-key' > {dotenv_target}",
            "",
            f"Get your API key from: {API_SETTINGS_URL}",
            "Go to Settings > API > Personal API keys > Create key",
        ]


def create_env_auth_manager(config: EnvAuthConfig | None = None) -> EnvironmentAuthManager:
    """Factory function to create environment authentication manager."""
    if config is None:
        config = EnvAuthConfig()
    return EnvironmentAuthManager(config)
