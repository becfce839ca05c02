"""schema_explorer -- Browse OpenAPI v3 specs through ``openapi://`` resource URIs.

This package loads one or more OpenAPI documents, dereferences them, and
exposes every part of them as an addressable resource. A URI such as
``openapi://petstore/paths/pets%2F%7Bid%7D/get`` resolves to the operation
object itself; ``openapi://petstore/components/schemas`` resolves to a
plain-text listing with a hint for the next step.

Typical workflow::

    schema-explorer -s petstore.yaml specs
    schema-explorer -s petstore.yaml read openapi://swagger-petstore/paths
    schema-explorer -s petstore.yaml complete operation path

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    parser: Spec loading and ``$ref`` dereferencing.
    registry: Loaded documents keyed by slug.
    addressing: URI grammar, builders, and path encoding.
    engine: Address resolution against the registry.
    rendering: Resolved nodes to list or detail result items.
    formatters: JSON / YAML serialisation of result items.
    service: Request boundary turning failures into error items.
    completion: Template variable completion.
    config: Configuration precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
