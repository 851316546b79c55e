"""Named datasets declared by Data blocks.

A Data block body is YAML::

    name: testdata
    fields:
      - name: field
    data:
      - field: abc
      - field: def

Every value is normalized to a string. Scripts see the dataset as a
tuple of read-only mappings bound to ``name``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

import yaml


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True, slots=True)
class Dataset:
    """A named table of string values.

    Attributes:
        name: Identifier the dataset is bound to in scripts
        rows: One mapping per record, field name to string value
        fields: Declared field names, possibly empty

    """

    name: str
    rows: tuple[Mapping[str, str], ...] = ()
    fields: tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, value: Any) -> Dataset:
        """Build a dataset from a decoded YAML document.

        Raises:
            ValueError: The document does not describe a dataset
        """
        if not isinstance(value, Mapping):
            raise ValueError("dataset must be a mapping with 'name' and 'data'")
        name = value.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("dataset 'name' must be a non-empty string")
        data = value.get("data") or []
        if not isinstance(data, list) or not all(isinstance(r, Mapping) for r in data):
            raise ValueError("dataset 'data' must be a list of mappings")
        declared = value.get("fields") or []
        if not isinstance(declared, list):
            raise ValueError("dataset 'fields' must be a list")
        field_names: list[str] = []
        for entry in declared:
            entry_name = entry.get("name") if isinstance(entry, Mapping) else entry
            if not isinstance(entry_name, str):
                raise ValueError("dataset field entries need a string 'name'")
            field_names.append(entry_name)
        rows = tuple(
            MappingProxyType({str(k): _cell(v) for k, v in row.items()}) for row in data
        )
        return cls(name, rows, tuple(field_names))

    @classmethod
    def from_yaml(cls, text: str) -> Dataset:
        try:
            value = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"invalid YAML: {exc}") from exc
        return cls.from_mapping(value)

    def columns(self) -> list[str]:
        """Sorted union of declared and used field names."""
        names = set(self.fields)
        for row in self.rows:
            names.update(row)
        return sorted(names)

    def table(self) -> tuple[list[str], list[list[str]]]:
        """Return ``(head, body)`` with a leading 1-based row number column."""
        columns = self.columns()
        body = [
            [str(number), *(row.get(column, "") for column in columns)]
            for number, row in enumerate(self.rows, start=1)
        ]
        return ["#", *columns], body

    def to_mapping(self) -> dict[str, Any]:
        mapping: dict[str, Any] = {"name": self.name}
        if self.fields:
            mapping["fields"] = [{"name": name} for name in self.fields]
        mapping["data"] = [dict(sorted(row.items())) for row in self.rows]
        return mapping

    def to_yaml(self) -> str:
        return yaml.safe_dump(
            self.to_mapping(),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
