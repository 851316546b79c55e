"""Add a block type of your own next to the built-in readers."""

from dataclasses import dataclass
from typing import ClassVar

from yamdr import BlockHeader, Yamdr, create_registry_with_defaults
from yamdr.readers import BlockOnlyReader
from yamdr.utils import html_escape


@dataclass(frozen=True)
class Callout:
    header: BlockHeader
    text: str

    inline: ClassVar[bool] = False

    def to_html(self) -> str:
        kind = html_escape(self.header.get_str("kind") or "note")
        return f'<aside class="callout {kind}">{html_escape(self.text)}</aside>'

    def to_markdown(self) -> str:
        return self.header.to_fence(self.text)


class CalloutReader(BlockOnlyReader):
    def can_read_block(self, header: BlockHeader) -> bool:
        return header.tag == "Callout"

    def read_block(self, header: BlockHeader, body: str) -> Callout:
        return Callout(header, body)


def registry():
    return create_registry_with_defaults().register(CalloutReader()).build()


md = Yamdr(registry_factory=registry)
print(md("```{t: Callout, kind: warning}\nMind the gap.\n```\n"))
