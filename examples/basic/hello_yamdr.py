"""Render a document with a script block to HTML and to canonical Markdown."""

from yamdr import Format, RenderOptions, render_markdown

source = """\
# Report

```{t: Script}
total = sum(range(1, 11))
debug("total is", total)
```

The average is `_total / 10_`.
"""

print(render_markdown(source))
print(render_markdown(source, RenderOptions(format=Format.MARKDOWN)))
