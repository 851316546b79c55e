"""Tests for reader registration and dispatch."""

from __future__ import annotations

import pytest

from yamdr.errors import UnknownBlockType
from yamdr.header import BlockHeader
from yamdr.readers import (
    BlockOnlyReader,
    BlockReader,
    ReaderRegistryBuilder,
    create_default_registry,
    create_registry_with_defaults,
)
from yamdr.readers.builtins import (
    ChartBlockReader,
    CodeBlockReader,
    GraphBlockReader,
    ScriptBlockReader,
)
from yamdr.readers.marker import ErrorMarker


class TagReader(BlockOnlyReader):
    """Claims one tag and records which instance handled it."""

    def __init__(self, tag: str, name: str) -> None:
        self.tag = tag
        self.name = name

    def can_read_block(self, header: BlockHeader) -> bool:
        return header.tag == self.tag

    def read_block(self, header: BlockHeader, body: str) -> ErrorMarker:
        return ErrorMarker(self.name)


class TestBuilder:
    """Builder validation and ordering."""

    def test_register_chains(self) -> None:
        builder = ReaderRegistryBuilder()
        assert builder.register(TagReader("A", "a")) is builder
        assert len(builder) == 1

    def test_rejects_non_readers(self) -> None:
        with pytest.raises(TypeError, match="does not implement BlockReader"):
            ReaderRegistryBuilder().register(object())  # type: ignore[arg-type]

    def test_build_is_a_snapshot(self) -> None:
        builder = ReaderRegistryBuilder().register(TagReader("A", "a"))
        registry = builder.build()
        builder.register(TagReader("B", "b"))
        assert len(registry) == 1

    def test_readers_satisfy_protocol(self) -> None:
        assert isinstance(TagReader("A", "a"), BlockReader)
        assert isinstance(ScriptBlockReader(), BlockReader)


class TestDispatch:
    """First match in registration order wins."""

    def test_first_registered_wins(self) -> None:
        registry = (
            ReaderRegistryBuilder()
            .register(TagReader("X", "first"))
            .register(TagReader("X", "second"))
            .build()
        )
        block = registry.read_block(BlockHeader("X"), "")
        assert block == ErrorMarker("first")

    def test_unknown_tag(self) -> None:
        registry = ReaderRegistryBuilder().register(TagReader("X", "x")).build()
        with pytest.raises(UnknownBlockType) as exc_info:
            registry.read_block(BlockHeader("Y"), "")
        assert exc_info.value.tag == "Y"

    def test_block_only_readers_skip_inline(self) -> None:
        registry = ReaderRegistryBuilder().register(TagReader("X", "x")).build()
        assert registry.find_inline_reader("_x_") is None

    def test_block_only_read_inline_raises(self) -> None:
        with pytest.raises(NotImplementedError):
            TagReader("X", "x").read_inline("_x_")


class TestDefaults:
    """Built-in readers."""

    def test_default_order(self) -> None:
        registry = create_default_registry()
        kinds = [type(reader) for reader in registry]
        assert kinds == [ScriptBlockReader, CodeBlockReader, ChartBlockReader, GraphBlockReader]

    def test_every_registry_is_fresh(self) -> None:
        first = create_default_registry().readers[0]
        second = create_default_registry().readers[0]
        assert first is not second
        assert first.runtime is not second.runtime

    def test_custom_reader_after_defaults(self) -> None:
        registry = create_registry_with_defaults().register(TagReader("Code", "mine")).build()
        reader = registry.find_block_reader(BlockHeader("Code"))
        assert isinstance(reader, CodeBlockReader)

    @pytest.mark.parametrize(
        "tag",
        ["Script", "ScriptGlobals", "DynamicTable", "DynamicChart", "Data", "Code", "Chart", "Graph"],
    )
    def test_builtin_tags_are_claimed(self, tag: str) -> None:
        assert create_default_registry().find_block_reader(BlockHeader(tag)) is not None

    def test_inline_expressions_claimed_by_script_reader(self) -> None:
        reader = create_default_registry().find_inline_reader("_1 + 1_")
        assert isinstance(reader, ScriptBlockReader)
