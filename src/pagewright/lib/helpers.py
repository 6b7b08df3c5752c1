"""
Inline helper expansion

Turns an ImageTag directive into <img> markup. The asset path rewrite is a
plain callable so the site generator can plug in its own rule; AssetResolver
is the default rule (Middleman-style images directory under an HTTP prefix).
"""

import html
import re
from typing import Callable, Dict, Optional

from ..config import appsettings
from ..models.directives import ImageTag

AssetRewrite = Callable[[str], str]

_ABSOLUTE_URL = re.compile(r'^(?:[A-Za-z][A-Za-z0-9+.-]*:|//)')


class AssetResolver:
    """
    Rewrites relative image paths to absolute asset URLs

    Absolute URLs (http://, //cdn, data:) and root-relative paths are left
    alone; everything else is placed under the images directory.

    Example:
        >>> AssetResolver().path_rewrite('foo.png')
        '/images/foo.png'
        >>> AssetResolver(http_prefix='/blog/', asset_host='https://cdn.example.org').path_rewrite('a/b.png')
        'https://cdn.example.org/blog/images/a/b.png'
    """

    def __init__(
        self,
        images_dir: Optional[str] = None,
        http_prefix: Optional[str] = None,
        asset_host: Optional[str] = None,
    ) -> None:
        self.images_dir = (appsettings.images_dir if images_dir is None else images_dir).strip('/')
        prefix = appsettings.http_prefix if http_prefix is None else http_prefix
        self.http_prefix = '/' + prefix.strip('/') + '/' if prefix.strip('/') else '/'
        host = appsettings.asset_host if asset_host is None else asset_host
        self.asset_host = host.rstrip('/')

    def path_rewrite(self, path: str) -> str:
        """Return the URL for an image path as written in a post"""
        if _ABSOLUTE_URL.match(path) or path.startswith('/'):
            return path

        relative = path[2:] if path.startswith('./') else path
        if self.images_dir:
            url = f"{self.http_prefix}{self.images_dir}/{relative}"
        else:
            url = f"{self.http_prefix}{relative}"
        return f"{self.asset_host}{url}"

    def __call__(self, path: str) -> str:
        return self.path_rewrite(path)

    def __repr__(self) -> str:
        return (
            f"AssetResolver(images_dir='{self.images_dir}', "
            f"http_prefix='{self.http_prefix}', asset_host='{self.asset_host}')"
        )


def attributes_render(attributes: Dict[str, str]) -> str:
    """Render an attribute mapping as ' name="value"' pairs in the given order"""
    return ''.join(
        f' {name}="{html.escape(str(value), quote=True)}"' for name, value in attributes.items()
    )


def imageTag_build(directive: ImageTag, asset_rewrite: AssetRewrite) -> str:
    """
    Expand an ImageTag directive to an <img> element

    The rewritten path becomes src; every other attribute is copied in
    source order, values attribute-escaped. A src keyword in the directive
    is ignored in favour of the rewritten path.

    Example:
        >>> imageTag_build(ImageTag(path='foo.png', attributes={'alt': 'Foo'}), AssetResolver())
        '<img src="/images/foo.png" alt="Foo">'
    """
    attributes = {'src': asset_rewrite(directive.path)}
    attributes.update((k, v) for k, v in directive.attributes.items() if k != 'src')
    return f"<img{attributes_render(attributes)}>"
