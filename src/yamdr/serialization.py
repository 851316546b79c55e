"""JSON serialization for segmented documents.

The dict form is what a block editor front end exchanges with the
pipeline::

    {
      "css": "...",
      "blocks": [{"id": 0, "html": "...", "markdown": "...", "external": null}],
      "datasets": {"testdata": {"name": "testdata", "data": [...]}}
    }

Thread Safety:
    All functions are pure.

"""

from __future__ import annotations

import json
from typing import Any

from yamdr.events import ExternalBlock
from yamdr.segmenter import DocumentBlock, DocumentBlocks


def to_dict(document: DocumentBlocks) -> dict[str, Any]:
    return {
        "css": document.css,
        "blocks": [
            {
                "id": block.id,
                "html": block.html,
                "markdown": block.markdown,
                "external": block.external.to_dict() if block.external else None,
            }
            for block in document.blocks
        ],
        "datasets": {name: dict(record) for name, record in document.datasets.items()},
    }


def from_dict(data: dict[str, Any]) -> DocumentBlocks:
    """Restore a segmented document, typically after front-end edits.

    Raises:
        KeyError: A required key is missing
    """
    blocks = []
    for entry in data["blocks"]:
        external = entry.get("external")
        blocks.append(
            DocumentBlock(
                id=int(entry["id"]),
                html=entry.get("html", ""),
                markdown=entry.get("markdown", ""),
                external=(
                    ExternalBlock(external.get("head", {}), external.get("body", ""))
                    if external
                    else None
                ),
            )
        )
    return DocumentBlocks(data.get("css", ""), blocks, dict(data.get("datasets", {})))


def to_json(document: DocumentBlocks, *, indent: int | None = None) -> str:
    return json.dumps(to_dict(document), indent=indent, ensure_ascii=False, default=str)


def from_json(data: str) -> DocumentBlocks:
    return from_dict(json.loads(data))
