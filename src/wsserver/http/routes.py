"""
=============================================================================
ROUTE TABLE
=============================================================================

Maps request targets to static content.

    ┌──────────────┬──────────────────────────────┐
    │   target     │   content                    │
    ├──────────────┼──────────────────────────────┤
    │   "/"        │   templates/home.html bytes  │
    └──────────────┴──────────────────────────────┘

The table is built once at startup (files are read eagerly, so a missing
template fails the launch, not the first request) and then handed to the
server. Worker threads only ever read it.

Matching is exact: "/" and "/index.html" are different targets, and the
query string is part of the target.
"""

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union


logger = logging.getLogger(__name__)


DEFAULT_TEMPLATES: Dict[str, str] = {"/": "home.html"}


class RouteTable:
    """
    Immutable target → content mapping.

    Usage:
        routes = RouteTable.from_templates("templates")
        content = routes.lookup("/")      # bytes, or None → 404
    """

    __slots__ = ("_routes",)

    def __init__(self, routes: Optional[Mapping[str, Union[str, bytes]]] = None):
        table: Dict[str, bytes] = {}
        for target, content in (routes or {}).items():
            table[target] = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        self._routes = MappingProxyType(table)

    @classmethod
    def from_templates(
        cls,
        directory: Union[str, Path],
        templates: Optional[Mapping[str, str]] = None,
    ) -> "RouteTable":
        """
        Read template files into a new table.

        Args:
            directory: Folder holding the template files.
            templates: target → file name inside `directory`.
                       Defaults to {"/": "home.html"}.

        Raises:
            FileNotFoundError: A template file does not exist.
        """
        directory = Path(directory)
        routes: Dict[str, bytes] = {}

        for target, filename in (templates or DEFAULT_TEMPLATES).items():
            path = directory / filename
            if not path.is_file():
                raise FileNotFoundError(f"Could not open file at {path}")

            routes[target] = path.read_bytes()
            logger.debug(f"Loaded route {target} from {path} ({len(routes[target])} bytes)")

        return cls(routes)

    def lookup(self, target: str) -> Optional[bytes]:
        """Content for `target`, or None when there is no route."""
        return self._routes.get(target)

    @property
    def targets(self) -> Tuple[str, ...]:
        return tuple(self._routes)

    def __contains__(self, target: object) -> bool:
        return target in self._routes

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[str]:
        return iter(self._routes)

    def __repr__(self) -> str:
        return f"RouteTable({list(self._routes)})"
