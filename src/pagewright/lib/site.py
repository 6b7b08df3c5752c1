"""
Site configuration loader.

A site may carry a site.yaml next to its posts:

    assets:
      http_prefix: /blog/
      images_dir: images
      asset_host: https://cdn.example.org
    partials:
      dir: partials
    render:
      strict: false

Every key is optional; missing keys fall back to AppSettings.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..config import appsettings
from .errors import SiteConfigError
from .helpers import AssetResolver


class Site:
    """
    Represents a site's rendering configuration.

    Holds the parsed site.yaml (or an empty config when there is none) and
    builds the collaborators the renderer needs from it.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Load site configuration.

        Args:
            config_path: Path to site.yaml, or None for defaults only

        Raises:
            SiteConfigError: If the file is given but missing or invalid
        """
        self.config_path = Path(config_path) if config_path is not None else None
        self.config: Dict[str, Any] = {}

        if self.config_path is not None:
            if not self.config_path.exists():
                raise SiteConfigError(f"Site configuration not found: {self.config_path}")
            self.config = self._config_load()

    def _config_load(self) -> Dict[str, Any]:
        """Load and parse site.yaml"""
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SiteConfigError(f"Failed to parse {self.config_path}: {e}")
        except OSError as e:
            raise SiteConfigError(f"Failed to load {self.config_path}: {e}")

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise SiteConfigError(f"{self.config_path} must contain a mapping at top level")
        return config

    def config_get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value from site.yaml.

        Supports nested keys with dot notation:
          site.config_get('assets.images_dir', 'images')
        """
        keys: list[str] = key.split('.')
        value: Any = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def assetResolver_make(self) -> AssetResolver:
        """Build the image path rewrite rule for this site"""
        return AssetResolver(
            images_dir=str(self.config_get('assets.images_dir', appsettings.images_dir)),
            http_prefix=str(self.config_get('assets.http_prefix', appsettings.http_prefix)),
            asset_host=str(self.config_get('assets.asset_host', appsettings.asset_host) or ''),
        )

    def partialsDir_get(self) -> str:
        """Partials directory name (relative to the input directory unless absolute)"""
        return str(self.config_get('partials.dir', appsettings.partials_dir))

    def strict_get(self) -> bool:
        """Whether unsupported directives should fail the render"""
        return bool(self.config_get('render.strict', appsettings.strict_mode))

    def __repr__(self) -> str:
        return f"Site(path='{self.config_path}')"
