"""Block headers: the typed mapping after a fence marker.

A fenced block is a custom block when its info string is a YAML flow
mapping (JSON objects included) with a string ``t`` key::

    ```{t: Script, hidden_title: Setup}
    ```{"t":"Code","filename":"main.py"}

Headers are re-emitted as compact JSON with ``t`` first, which is the
canonical form written by the Markdown renderer.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import yaml

from yamdr.errors import MalformedHeader
from yamdr.utils.text import fenced

EXTERNAL_TAG = "External"


@dataclass(frozen=True, slots=True)
class BlockHeader:
    """Parsed block header.

    Attributes:
        tag: Block type, the value of ``t``
        fields: Every other key of the header mapping, in source order

    """

    tag: str
    fields: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def parse(cls, info: str) -> BlockHeader:
        """Parse a fence info string.

        Raises:
            MalformedHeader: The info string is not a mapping with a string ``t``
        """
        text = info.strip()
        if not text.startswith("{"):
            raise MalformedHeader(info)
        try:
            value = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise MalformedHeader(info, f"invalid header literal ({exc.__class__.__name__})") from exc
        if not isinstance(value, dict):
            raise MalformedHeader(info, "header is not a mapping")
        tag = value.pop("t", None)
        if not isinstance(tag, str) or not tag:
            raise MalformedHeader(info, "header has no string 't' key")
        return cls(tag, {str(k): v for k, v in value.items()})

    @property
    def is_external(self) -> bool:
        return self.tag == EXTERNAL_TAG

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    def get_str(self, key: str) -> str | None:
        """Return a field as a string, or None when it is absent."""
        value = self.fields.get(key)
        return None if value is None else str(value)

    def to_info(self) -> str:
        """Serialize as compact JSON with ``t`` first."""
        return json.dumps(
            {"t": self.tag, **self.fields},
            separators=(",", ":"),
            ensure_ascii=False,
            default=str,
        )

    def to_fence(self, body: str) -> str:
        """Serialize a fenced block carrying this header and body."""
        return fenced(self.to_info(), body)
