"""Request boundary for reading ``openapi://`` resources.

:class:`ResourceService` strings the pipeline together -- parse, resolve,
render, format -- and is the one place where resolution failures are caught.
A failure never escapes :meth:`ResourceService.read`; it becomes a single
plain-text error item addressed at the best URI available for the request.
"""

from __future__ import annotations

import logging

from schema_explorer.addressing import error_suffix, parse_address
from schema_explorer.engine import resolve_address
from schema_explorer.exceptions import ExplorerError, InvalidAddressError
from schema_explorer.formatters import TEXT_PLAIN, Formatter, create_formatter, format_results
from schema_explorer.models import FormattedResultItem, SpecsListAddress
from schema_explorer.registry import SpecRegistry
from schema_explorer.rendering import error_item, render

logger = logging.getLogger(__name__)


class ResourceService:
    """Reads resources from a fixed registry with a fixed output formatter.

    Args:
        registry: The loaded specs. Shared read-only across requests.
        formatter: Serialiser for detail payloads. Defaults to JSON.
    """

    def __init__(self, registry: SpecRegistry, formatter: Formatter | None = None) -> None:
        self.registry = registry
        self.formatter = formatter or create_formatter()

    def read(self, uri: str) -> list[FormattedResultItem]:
        """Resolve *uri* into its formatted result items.

        Returns:
            One item per resolved key, or a single error item.
        """
        try:
            address = parse_address(uri)
        except InvalidAddressError as exc:
            logger.warning("Error handling request %s: %s", uri, exc)
            return [FormattedResultItem(uri=uri, mime_type=TEXT_PLAIN, text=str(exc), is_error=True)]

        spec_id = "" if isinstance(address, SpecsListAddress) else address.spec_id
        try:
            items = render(resolve_address(address, self.registry))
        except ExplorerError as exc:
            logger.warning("Error handling request %s: %s", uri, exc)
            items = [error_item(error_suffix(address), str(exc))]
        return format_results(items, spec_id, self.formatter)
