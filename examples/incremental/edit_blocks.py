"""Edit one block of a segmented document and re-render the rest."""

from yamdr import render_blocks

source = """\
```{t: Script}
price = 12
```

Price with tax: `_price * 1.2_`
"""

document = render_blocks(source)
for block in document.blocks:
    print(block.id, repr(block.markdown))

# The user edits the first block; later blocks see the new value.
document.blocks[0].markdown = "```{t: Script}\nprice = 20\n```\n"
document.rerender()
print(document.blocks[1].html)
print(document.to_json(indent=2)[:400])
