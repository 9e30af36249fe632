"""
Apply ordering for manifest batches.

Namespaces and CRDs go first so that documents placed in a new namespace, or
instances of a new custom resource, do not fail with a transient not-found.
"""

from typing import Iterable

from .manifests import ManifestDocument


PRIORITY_KINDS = frozenset({"Namespace", "CustomResourceDefinition"})


def order_documents(documents: Iterable[ManifestDocument]) -> list[ManifestDocument]:
    """Two passes: ``PRIORITY_KINDS`` first, then the rest; input order is kept within each pass."""
    first: list[ManifestDocument] = []
    second: list[ManifestDocument] = []
    for document in documents:
        (first if document.kind in PRIORITY_KINDS else second).append(document)
    return first + second
