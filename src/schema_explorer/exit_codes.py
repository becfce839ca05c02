"""Numeric process exit codes for the ``schema-explorer`` CLI.

Each constant maps to an error category and is referenced by the matching
:class:`~schema_explorer.exceptions.ExplorerError` subclass, so shell
wrappers can tell a bad URI apart from a spec that failed to load without
parsing stderr.

Example::

    $ schema-explorer --spec broken.yaml specs
    $ echo $?
    7   # EXIT_SPEC_LOAD_ERROR -- the spec could not be loaded
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, or a read produced error result items."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments, a malformed ``openapi://`` URI, or an empty selector."""

EXIT_NOT_FOUND = 4
"""The addressed spec, field, path, method, or component does not exist."""

EXIT_SPEC_LOAD_ERROR = 7
"""An OpenAPI document could not be read, parsed, or dereferenced."""

EXIT_INTERRUPTED = 130
"""The process was interrupted with Ctrl-C."""
