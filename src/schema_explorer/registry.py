"""Spec registry -- the loaded documents, keyed by a slug derived from their title.

The registry is populated once at start-up by :meth:`SpecRegistry.load` and
is read-only afterwards: it exposes lookups and listings but no mutation
API. The same instance is passed explicitly to every request handler and to
the completion provider.

Slugs come from ``info.title`` via :func:`slugify`; when that yields an empty
string, the source file name is used instead, and failing that the
placeholder ``api``. If two documents produce the same slug, the first one
loaded wins and the later one is skipped with a warning.

Example::

    registry = SpecRegistry.load(["catalog.yaml", "orders.json"])
    registry.slugs()          # ['catalog-api', 'orders-api']
    registry.get("orders-api")  # OpenAPIDocument
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Iterator, Sequence

from schema_explorer.exceptions import (
    ConfigError,
    NotFoundError,
    SpecLoadError,
    TransformError,
)
from schema_explorer.models import OpenAPIDocument, RegistryEntry, SourceFormat
from schema_explorer.parser import load_spec, resolve, source_stem

logger = logging.getLogger(__name__)

PLACEHOLDER_SLUG = "api"
"""Slug used when neither the title nor the source name yields one."""

_STRIP_RE = re.compile(r"[^\w\s-]", re.ASCII)
_SEPARATOR_RE = re.compile(r"[\s_]+")
_HYPHENS_RE = re.compile(r"-+")


def slugify(text: str) -> str:
    """Turn *text* into a URI-safe identifier.

    Example: ``"VTEX - Catalog API"`` becomes ``"vtex-catalog-api"``.
    """
    slug = _STRIP_RE.sub("", text.lower().strip())
    slug = _SEPARATOR_RE.sub("-", slug)
    slug = _HYPHENS_RE.sub("-", slug)
    return slug.strip("-")


def derive_slug(title: str, source: str) -> str:
    """Slug for a document: its title, else its source file name, else ``api``."""
    return slugify(title) or slugify(source_stem(source)) or PLACEHOLDER_SLUG


def build_entry(
    raw: dict[str, Any],
    source: str,
    source_format: SourceFormat = SourceFormat.OPENAPI,
) -> RegistryEntry:
    """Dereference and validate *raw*, returning its registry entry.

    Raises:
        TransformError: If dereferencing fails or the document is not OpenAPI v3.
    """
    document = OpenAPIDocument.from_dereferenced(resolve(raw, source_format))
    return RegistryEntry(
        slug=derive_slug(document.title, source),
        title=document.title,
        description=document.description,
        version=document.version,
        path_count=len(document.path_items()),
        source=source,
        document=document,
    )


class SpecRegistry:
    """Immutable, insertion-ordered collection of :class:`RegistryEntry` objects.

    Args:
        entries: Entries in load order. Entries whose slug is already taken
            are skipped with a warning.
    """

    def __init__(self, entries: Iterable[RegistryEntry] = ()) -> None:
        self._entries: dict[str, RegistryEntry] = {}
        for entry in entries:
            if entry.slug in self._entries:
                logger.warning(
                    'Spec slug "%s" already exists. Skipping: %s', entry.slug, entry.source
                )
                continue
            self._entries[entry.slug] = entry

    @classmethod
    def load(
        cls,
        sources: Sequence[str],
        source_format: SourceFormat = SourceFormat.OPENAPI,
    ) -> SpecRegistry:
        """Load, dereference, and register every source in order.

        A source that fails to load or dereference is logged and skipped; it
        does not stop the remaining sources from loading.

        Raises:
            ConfigError: If no source could be loaded at all.
        """
        entries: list[RegistryEntry] = []
        for source in sources:
            try:
                entries.append(build_entry(load_spec(source), source, source_format))
            except (SpecLoadError, TransformError) as exc:
                logger.error("Skipping spec %s: %s", source, exc)
                continue
            logger.debug("Loaded spec %s as %s", source, entries[-1].slug)

        registry = cls(entries)
        if not registry:
            raise ConfigError("No specs were loaded successfully.")
        return registry

    @classmethod
    def from_documents(
        cls,
        documents: Iterable[tuple[str, dict[str, Any]]],
        source_format: SourceFormat = SourceFormat.OPENAPI,
    ) -> SpecRegistry:
        """Build a registry from already-parsed ``(source, raw_document)`` pairs.

        Unlike :meth:`load`, dereferencing failures propagate.
        """
        return cls(build_entry(raw, source, source_format) for source, raw in documents)

    def get(self, slug: str) -> OpenAPIDocument:
        """Return the document registered under *slug*.

        Raises:
            NotFoundError: If *slug* is unknown; lists the available slugs.
        """
        return self.entry(slug).document

    def entry(self, slug: str) -> RegistryEntry:
        try:
            return self._entries[slug]
        except KeyError:
            raise NotFoundError(slug, self.slugs()) from None

    def entries(self) -> list[RegistryEntry]:
        """All entries in load order."""
        return list(self._entries.values())

    def slugs(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, slug: object) -> bool:
        return slug in self._entries

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)
