"""Rich Console factory and theme for funnelctl output.

Consoles render to a StringIO buffer so renderers keep a
``render_result() -> str`` contract. In non-TTY environments (tests, pipes)
Rich disables color codes automatically.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

FUNNEL_THEME = Theme(
    {
        "funnel.ok": "bold green",
        "funnel.error": "bold red",
        "funnel.warning": "bold yellow",
        "funnel.op": "bold cyan",
        "funnel.key": "dim",
        "funnel.id": "bold blue",
        "funnel.title": "bold",
        "funnel.kind.sales": "green",
        "funnel.kind.order": "blue",
        "funnel.kind.upsell": "magenta",
        "funnel.kind.downsell": "yellow",
        "funnel.kind.thankyou": "cyan",
    }
)

_KIND_STYLES: dict[str, str] = {
    "sales": "funnel.kind.sales",
    "order": "funnel.kind.order",
    "upsell": "funnel.kind.upsell",
    "downsell": "funnel.kind.downsell",
    "thankyou": "funnel.kind.thankyou",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=FUNNEL_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_kind(kind: str) -> str:
    """Return the Rich style name for a node kind."""
    return _KIND_STYLES.get(kind, "")
