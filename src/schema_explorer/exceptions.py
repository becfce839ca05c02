"""Exception hierarchy for schema_explorer.

All exceptions inherit from :class:`ExplorerError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`schema_explorer.exit_codes`. Resolution failures are caught at the
request boundary (:meth:`~schema_explorer.service.ResourceService.read`) and
turned into error result items; load and configuration failures reach the
CLI entry point, which exits with the error's code.

Subclass hierarchy::

    ExplorerError (exit 1)
    +-- ConfigError                      (exit 1)
    +-- SpecLoadError                    (exit 7)
    +-- TransformError                   (exit 7)
    +-- ResolutionError                  (exit 4)
        +-- NotFoundError                (exit 4)
        +-- FieldNotFoundError           (exit 4)
        +-- PathNotFoundError            (exit 4)
        +-- ComponentTypeNotFoundError   (exit 4)
        +-- NoComponentsOfTypeError      (exit 4)
        +-- NoValidMethodsError          (exit 4)
        +-- NoValidNamesError            (exit 4)
        +-- InvalidAddressError          (exit 2)
        +-- InvalidComponentTypeError    (exit 2)
        +-- EmptySelectorError           (exit 2)
"""

from __future__ import annotations

from typing import Sequence

from schema_explorer.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SPEC_LOAD_ERROR,
)


class ExplorerError(Exception):
    """Base exception for all schema_explorer errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`schema_explorer.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(ExplorerError):
    """Raised for configuration problems (no spec paths, bad output format, unmatched globs)."""

    exit_code = EXIT_GENERIC_FAILURE


class SpecLoadError(ExplorerError):
    """Raised when a spec source cannot be read or parsed as JSON/YAML."""

    exit_code = EXIT_SPEC_LOAD_ERROR


class TransformError(ExplorerError):
    """Raised when a document cannot be dereferenced or is not OpenAPI v3.

    Fatal for the load of that one document: it never enters the registry.
    """

    exit_code = EXIT_SPEC_LOAD_ERROR


# --- Resolution errors ---


class ResolutionError(ExplorerError):
    """Base class for failures while resolving an ``openapi://`` address."""

    exit_code = EXIT_NOT_FOUND


class InvalidAddressError(ResolutionError):
    """Raised when a URI does not match any of the six address shapes."""

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, uri: str, reason: str):
        self.uri = uri
        self.reason = reason
        super().__init__(f"Invalid resource URI '{uri}': {reason}")


class NotFoundError(ResolutionError):
    """Raised when a spec id is not present in the registry."""

    def __init__(self, slug: str, available_slugs: Sequence[str]):
        self.slug = slug
        self.available_slugs = list(available_slugs)
        super().__init__(
            f'Spec "{slug}" not found. Available: {", ".join(self.available_slugs)}'
        )


class FieldNotFoundError(ResolutionError):
    """Raised when a top-level field is absent from the document."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f'Field "{field}" not found in the OpenAPI document.')


class PathNotFoundError(ResolutionError):
    """Raised when a path is not declared under ``paths``."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f'Path "{path}" not found in the specification.')


class InvalidComponentTypeError(ResolutionError):
    """Raised when a component type is outside the OpenAPI allow-list."""

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, component_type: str):
        self.component_type = component_type
        super().__init__(f"Invalid component type: {component_type}")


class ComponentTypeNotFoundError(ResolutionError):
    """Raised when ``components`` has no key for a valid component type."""

    def __init__(self, component_type: str, available_types: Sequence[str]):
        self.component_type = component_type
        self.available_types = list(available_types)
        super().__init__(
            f'Component type "{component_type}" not found in the specification. '
            f'Available types: {", ".join(self.available_types)}'
        )


class NoComponentsOfTypeError(ResolutionError):
    """Raised when ``components.{type}`` exists but is empty."""

    def __init__(self, component_type: str):
        self.component_type = component_type
        super().__init__(f'No components of type "{component_type}" found.')


class NoValidMethodsError(ResolutionError):
    """Raised when none of the requested methods is declared on a path."""

    def __init__(self, requested: Sequence[str], available: Sequence[str], path: str):
        self.requested = list(requested)
        self.available = list(available)
        self.path = path
        super().__init__(
            f"None of the requested methods ({', '.join(self.requested)}) are valid "
            f'for path "{path}". Available methods: {", ".join(self.available)}'
        )


class NoValidNamesError(ResolutionError):
    """Raised when none of the requested component names exists."""

    def __init__(
        self, requested: Sequence[str], available: Sequence[str], component_type: str
    ):
        self.requested = list(requested)
        self.available = list(available)
        self.component_type = component_type
        super().__init__(
            f"None of the requested names ({', '.join(self.requested)}) are valid "
            f'for component type "{component_type}". '
            f'Available names: {", ".join(self.available)}'
        )


class EmptySelectorError(ResolutionError):
    """Raised when a comma-separated selector has no non-empty element."""

    exit_code = EXIT_INVALID_USAGE
