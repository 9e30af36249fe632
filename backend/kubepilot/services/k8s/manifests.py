"""
Manifest parsing.

Splits a multi-document YAML payload into the documents worth sending to the
API server. Malformed YAML aborts the whole payload; documents that parse but
lack the fields we need are reported individually so the rest of the batch
still goes through.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

import yaml

from ...exceptions import ManifestParseError


INVALID_MANIFEST = "Invalid manifest (missing kind/apiVersion)"


@dataclass(frozen=True)
class ManifestDocument:
    """One decoded resource document.

    Only ``kind``, ``api_version``, ``name`` and ``namespace`` are inspected;
    ``body`` is the full mapping and is sent to the API server as-is.
    """

    index: int
    kind: str
    api_version: str
    name: str
    namespace: Optional[str] = None
    body: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class DocumentError:
    """A document rejected before any API call."""

    index: int
    message: str
    kind: Optional[str] = None


ParsedDocument = Union[ManifestDocument, DocumentError]


def _non_empty_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def parse_document(index: int, data: Any) -> ParsedDocument:
    """Validate one decoded YAML document."""
    if not isinstance(data, dict):
        return DocumentError(index=index, message=INVALID_MANIFEST)

    kind = _non_empty_str(data.get("kind"))
    api_version = _non_empty_str(data.get("apiVersion"))
    if kind is None or api_version is None:
        return DocumentError(index=index, message=INVALID_MANIFEST, kind=kind)

    metadata = data.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}
    name = _non_empty_str(metadata.get("name"))
    if name is None:
        return DocumentError(index=index, message=f"Missing metadata.name for kind {kind}", kind=kind)

    return ManifestDocument(
        index=index,
        kind=kind,
        api_version=api_version,
        name=name,
        namespace=_non_empty_str(metadata.get("namespace")),
        body=data,
    )


def parse_manifests(text: str) -> list[ParsedDocument]:
    """
    Parse a multi-document YAML payload.

    Blank documents are skipped and do not consume an index, so the indices
    of the returned items are exactly ``range(len(result))``.

    Raises:
        ManifestParseError: the payload is not well-formed YAML.
    """
    try:
        raw_documents = list(yaml.safe_load_all(text))
    except yaml.YAMLError as exc:
        raise ManifestParseError(f"Invalid YAML: {exc}") from exc

    parsed: list[ParsedDocument] = []
    for data in raw_documents:
        if data is None:
            continue
        parsed.append(parse_document(len(parsed), data))
    return parsed
