"""Payload formatters and the conversion of render items into formatted items."""

from __future__ import annotations

import json
from typing import Any, Callable, NamedTuple

import yaml

from schema_explorer.addressing import full_uri
from schema_explorer.exceptions import ConfigError
from schema_explorer.models import FormattedResultItem, OutputFormat, RenderResultItem

TEXT_PLAIN = "text/plain"


class Formatter(NamedTuple):
    """A serialiser for detail payloads and the MIME type it produces."""

    name: OutputFormat
    mime_type: str
    format: Callable[[Any], str]


class _PayloadDumper(yaml.SafeDumper):
    """Writes shared subtrees out in full instead of as anchors and aliases."""

    def ignore_aliases(self, data: Any) -> bool:  # noqa: ANN401
        return True


# Scalars JSON has no type for (YAML binary, sets) fall back to their str().
def _to_json(data: Any) -> str:  # noqa: ANN401
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _to_minified_json(data: Any) -> str:  # noqa: ANN401
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False, default=str)


def _to_yaml(data: Any) -> str:  # noqa: ANN401
    return yaml.dump(
        data,
        Dumper=_PayloadDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )


FORMATTERS: dict[OutputFormat, Formatter] = {
    OutputFormat.JSON: Formatter(OutputFormat.JSON, "application/json", _to_json),
    OutputFormat.YAML: Formatter(OutputFormat.YAML, "text/yaml", _to_yaml),
    OutputFormat.JSON_MINIFIED: Formatter(
        OutputFormat.JSON_MINIFIED, "application/json", _to_minified_json
    ),
}


def create_formatter(output_format: OutputFormat | str = OutputFormat.JSON) -> Formatter:
    """Return the formatter registered for *output_format*.

    Raises:
        ConfigError: If the format is not one of ``json``, ``yaml``, ``json-minified``.
    """
    try:
        return FORMATTERS[OutputFormat(output_format)]
    except ValueError:
        raise ConfigError(
            "Invalid output format. Supported formats: "
            + ", ".join(fmt.value for fmt in FORMATTERS)
        ) from None


def format_item(item: RenderResultItem, spec_id: str, formatter: Formatter) -> FormattedResultItem:
    """Encode one render item as text.

    Error and list items are plain text; detail payloads go through
    *formatter*.
    """
    uri = full_uri(spec_id, item.uri_suffix)
    if item.is_error:
        return FormattedResultItem(
            uri=uri, mime_type=TEXT_PLAIN, text=item.error_text or "", is_error=True
        )
    if item.render_as_list:
        return FormattedResultItem(uri=uri, mime_type=TEXT_PLAIN, text=str(item.payload))
    return FormattedResultItem(
        uri=uri, mime_type=formatter.mime_type, text=formatter.format(item.payload)
    )


def format_results(
    items: list[RenderResultItem], spec_id: str, formatter: Formatter
) -> list[FormattedResultItem]:
    return [format_item(item, spec_id, formatter) for item in items]
