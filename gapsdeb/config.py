"""Configuration settings for gapsdeb.

Uses pydantic-settings for config parsing from environment variables,
an optional .env file, an optional gapsdeb.yaml file, and defaults.
Configuration precedence: env vars > .env > gapsdeb.yaml > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_REPO_URL = "https://github.com/Airblader/i3.git"


def _default_user_config_paths() -> list[Path]:
    """Return the conventional i3 config file locations."""
    return [
        Path.home() / ".config" / "i3" / "config",
        Path.home() / ".i3" / "config",
    ]


def _default_packaging_tools() -> list[str]:
    """Return the Debian packages providing the packaging toolchain."""
    return ["devscripts", "dpkg-dev", "equivs", "patch"]


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the GAPSDEB_ prefix.
    List values are given as JSON in the environment.
    """

    model_config = SettingsConfigDict(
        env_prefix="GAPSDEB_",
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file="gapsdeb.yaml",
        extra="ignore",
    )

    # Paths
    workdir: Path = Field(
        default_factory=Path.cwd,
        description="Working directory holding the source tree and artifacts",
    )
    source_dirname: str = Field(
        default="i3-gaps",
        description="Directory name of the cloned source tree inside workdir",
    )
    patches_dir: Path | None = Field(
        default=None,
        description="Directory containing patches (defaults to <workdir>/patches)",
    )
    patches: list[str] = Field(
        default_factory=list,
        description="Ordered patch file names; empty applies every *.patch file",
    )
    user_config_paths: list[Path] = Field(
        default_factory=_default_user_config_paths,
        description="i3 config files offered for the configuration snippet",
    )

    # Upstream
    repo_url: str = Field(
        default=DEFAULT_REPO_URL,
        description="Upstream git repository URL",
    )
    stable_branch: str = Field(default="gaps", description="Default branch")
    next_branch: str = Field(
        default="gaps-next",
        description="Alternative development branch",
    )
    version_file: str = Field(
        default="I3_VERSION",
        description="Upstream version marker file, relative to the source tree",
    )

    # Packaging
    build_suffix: str = Field(
        default="1~gaps",
        description="Debian revision prefix placed before the build tag",
    )
    maintainer_name: str = Field(
        default="gapsdeb",
        description="Changelog author name (DEBFULLNAME)",
    )
    maintainer_email: str = Field(
        default="gapsdeb@localhost",
        description="Changelog author email (DEBEMAIL)",
    )
    changelog_distribution: str = Field(
        default="unstable",
        description="Distribution written to the new changelog entry",
    )
    changelog_message: str = Field(
        default="New upstream release.",
        description="Message of the new changelog entry",
    )
    packaging_tools: list[str] = Field(
        default_factory=_default_packaging_tools,
        description="Packages required to build",
    )
    privilege_command: str = Field(
        default="sudo",
        description="Command prefixed to package installs (empty to disable)",
    )
    build_jobs: int | None = Field(
        default=None,
        ge=1,
        description="Parallel jobs passed to dpkg-buildpackage",
    )
    build_timeout: int | None = Field(
        default=None,
        ge=60,
        description="Timeout for the package build in seconds",
    )

    # Operational modes
    assume_defaults: bool = Field(
        default=False,
        description="Answer every prompt with its default (non-interactive)",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @property
    def source_dir(self) -> Path:
        """Path of the cloned source tree."""
        return self.workdir / self.source_dirname

    @property
    def effective_patches_dir(self) -> Path:
        """Patches directory, falling back to <workdir>/patches."""
        return self.patches_dir or self.workdir / "patches"

    def privileged(self, argv: list[str]) -> list[str]:
        """Prefix a command with the privilege command, if any."""
        if self.privilege_command:
            return [self.privilege_command, *argv]
        return list(argv)


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment and config files.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["DEFAULT_REPO_URL", "Settings", "get_settings", "print_settings_json"]
