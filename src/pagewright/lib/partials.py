"""
Partials collection

Partials are reusable named fragments (a "tutorial series" banner, an author
box) inlined into posts by <%= partial 'name' %>. The collection is built once,
before rendering starts, and is read-only afterwards so any number of
documents can share it.
"""

from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Optional, Union

from .log import LOG

# Extensions stripped from partial filenames when deriving names
TEMPLATE_EXTENSIONS = ('.erb', '.html', '.md', '.markdown', '.txt')


def name_normalize(filename: str) -> str:
    """
    Derive a partial name from a path relative to the partials directory

    Example:
        >>> name_normalize('series/_banner.html.erb')
        'series/banner'
    """
    parts = filename.replace('\\', '/').split('/')
    stem = parts[-1]

    changed = True
    while changed:
        changed = False
        for extension in TEMPLATE_EXTENSIONS:
            if stem.endswith(extension) and len(stem) > len(extension):
                stem = stem[: -len(extension)]
                changed = True

    if stem.startswith('_') and len(stem) > 1:
        stem = stem[1:]
    parts[-1] = stem
    return '/'.join(parts)


class PartialCollection(Mapping):
    """
    Immutable mapping of partial name to partial source text

    Lookups are forgiving about the spellings Middleman-style sources use:
    'banner', '_banner', '/partials/banner' and 'banner.html.erb' all find
    the same entry when the collection is loaded with partials_prefix.
    """

    def __init__(self, partials: Optional[Mapping] = None, partials_prefix: str = "") -> None:
        """
        Args:
            partials: Initial name → text mapping (copied)
            partials_prefix: Directory prefix sources may put in front of
                             names (e.g., "partials" for 'partials/banner')
        """
        self._partials: Mapping[str, str] = MappingProxyType(dict(partials or {}))
        self.partials_prefix = partials_prefix.strip('/')

    @classmethod
    def directory_load(
        cls,
        directory: Union[str, Path],
        partials_prefix: Optional[str] = None,
    ) -> "PartialCollection":
        """
        Load every file under a directory as a partial

        Args:
            directory: Partials directory
            partials_prefix: Prefix accepted in source names (defaults to the
                             directory's own name)

        Returns:
            PartialCollection keyed by normalized relative names
        """
        directory = Path(directory)
        partials: Dict[str, str] = {}

        for path in sorted(directory.rglob('*')):
            if not path.is_file():
                continue
            name = name_normalize(path.relative_to(directory).as_posix())
            if name in partials:
                LOG(f"Partial '{name}' defined more than once, keeping {path.name}", level=1)
            partials[name] = path.read_text(encoding='utf-8')
            LOG(f"Loaded partial '{name}' from {path}", level=3)

        prefix = directory.name if partials_prefix is None else partials_prefix
        LOG(f"Loaded {len(partials)} partials from {directory}", level=2)
        return cls(partials, partials_prefix=prefix)

    def candidates(self, name: str) -> List[str]:
        """Names tried, in order, when looking up a partial"""
        tried = [name]
        stripped = name.lstrip('/')
        tried.append(stripped)

        if self.partials_prefix and stripped.startswith(self.partials_prefix + '/'):
            stripped = stripped[len(self.partials_prefix) + 1:]
            tried.append(stripped)

        tried.append(name_normalize(stripped))

        unique: List[str] = []
        for candidate in tried:
            if candidate and candidate not in unique:
                unique.append(candidate)
        return unique

    def resolve(self, name: str) -> Optional[str]:
        """Return the canonical key for a partial name, or None if not found"""
        for candidate in self.candidates(name):
            if candidate in self._partials:
                return candidate
        return None

    def lookup(self, name: str) -> Optional[str]:
        """Return the source text of a partial, or None if not found"""
        key = self.resolve(name)
        return self._partials[key] if key is not None else None

    def __getitem__(self, name: str) -> str:
        key = self.resolve(name)
        if key is None:
            raise KeyError(name)
        return self._partials[key]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.resolve(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._partials)

    def __len__(self) -> int:
        return len(self._partials)

    def __repr__(self) -> str:
        return f"PartialCollection({sorted(self._partials)!r})"
