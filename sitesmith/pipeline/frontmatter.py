"""Split YAML front matter from a document body."""

from __future__ import annotations

import re
from typing import Any

import yaml

from sitesmith.errors import MetadataError

DELIMITER = b"---"

_BOOL_TAG = "tag:yaml.org,2002:bool"


class FrontMatterLoader(yaml.SafeLoader):
    """SafeLoader with YAML 1.2 booleans.

    Only ``true`` / ``false`` are booleans, so keys like ``on`` or ``no``
    stay strings.
    """


FrontMatterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _BOOL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
FrontMatterLoader.add_implicit_resolver(
    _BOOL_TAG, re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"), list("tTfF")
)


def split_front_matter(
    raw: bytes, source: object = "<document>"
) -> tuple[dict[str, Any] | None, bytes]:
    """Return ``(meta, body)`` for raw document bytes.

    Documents that don't start with ``---`` have no metadata and the whole
    input is the body. Otherwise the input is split into at most three parts
    (empty preamble, metadata block, body) and the block is parsed as YAML.
    An empty block gives ``None``. Top-level keys are always strings.

    Raises MetadataError for malformed YAML, a non-mapping block, or a
    missing closing delimiter.
    """
    if not raw.startswith(DELIMITER):
        return None, raw

    parts = raw.split(DELIMITER, 2)
    if len(parts) < 3:
        raise MetadataError(source, "missing closing '---' delimiter")

    try:
        meta = yaml.load(parts[1], Loader=FrontMatterLoader)
    except yaml.YAMLError as e:
        raise MetadataError(source, str(e)) from e

    if meta is None:
        return None, parts[2]
    if not isinstance(meta, dict):
        raise MetadataError(source, f"expected a mapping, got {type(meta).__name__}")

    return {str(key): value for key, value in meta.items()}, parts[2]
