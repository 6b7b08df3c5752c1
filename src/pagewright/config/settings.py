"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use PAGEWRIGHT_ prefix (e.g., PAGEWRIGHT_STRICT_MODE=true).

Settings can also be loaded from a .env file in the project root.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use PAGEWRIGHT_ prefix.

    Examples:
        PAGEWRIGHT_IMAGES_DIR=assets/img
        PAGEWRIGHT_STRICT_MODE=true
        PAGEWRIGHT_MAX_INCLUDE_DEPTH=8
    """

    model_config = SettingsConfigDict(
        env_prefix="PAGEWRIGHT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Parser configuration
    placeholder_prefix: str = Field(
        default="\x00FENCE_",
        description="Prefix for fenced code placeholders in body text (uses null byte to avoid collisions)",
    )

    placeholder_suffix: str = Field(
        default="\x00",
        description="Suffix for fenced code placeholders in body text (uses null byte to avoid collisions)",
    )

    front_matter_delimiter: str = Field(
        default="---",
        description="Line that opens and closes the front-matter block",
    )

    # Rendering configuration
    strict_mode: bool = Field(
        default=False,
        description="Strict mode: unsupported directives raise instead of passing through",
    )

    max_include_depth: int = Field(
        default=16,
        description="Maximum nesting depth of partial includes",
    )

    # Asset configuration
    http_prefix: str = Field(
        default="/",
        description="URL prefix the site is served under",
    )

    images_dir: str = Field(
        default="images",
        description="Directory (relative to http_prefix) holding image assets",
    )

    asset_host: str = Field(
        default="",
        description="Optional host prepended to rewritten asset URLs (e.g. https://cdn.example.org)",
    )

    partials_dir: str = Field(
        default="partials",
        description="Default partials directory name (relative to the input directory)",
    )

    # Output configuration
    output_manifest: str = Field(
        default="manifest.yaml",
        description="Filename of the batch manifest written to the output directory",
    )

    def placeHolder_make(self, index: int) -> str:
        """
        Generate a placeholder string for a protected fenced block at given index.

        Args:
            index: Zero-based index of the fenced block

        Returns:
            Placeholder string (e.g., "\\x00FENCE_0\\x00")

        Example:
            >>> settings = AppSettings()
            >>> settings.placeHolder_make(0)
            '\\x00FENCE_0\\x00'
        """
        return f"{self.placeholder_prefix}{index}{self.placeholder_suffix}"

    def fenceIndex_extract(self, placeholder: str) -> int | None:
        """
        Extract the fenced block index from a placeholder string.

        Args:
            placeholder: Placeholder string to parse

        Returns:
            Block index if valid placeholder, None otherwise

        Example:
            >>> settings = AppSettings()
            >>> settings.fenceIndex_extract('\\x00FENCE_0\\x00')
            0
        """
        if not placeholder.startswith(self.placeholder_prefix):
            return None
        if not placeholder.endswith(self.placeholder_suffix):
            return None

        # Extract the middle part
        content = placeholder[len(self.placeholder_prefix) : -len(self.placeholder_suffix)]

        try:
            return int(content)
        except ValueError:
            return None


# Singleton instance - import this in your code
appsettings = AppSettings()
