import logging
from typing import Optional
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

# ========== UI Theme ==========
PALETTES = {
    "light": {
        "ok":     "bold magenta",
        "warn":   "bold yellow",
        "err":    "bold red",
        "info":   "bold cyan",
        "accent": "magenta",
    },
    "dark": {
        "ok":     "bold bright_magenta",
        "warn":   "bold bright_yellow",
        "err":    "bold bright_red",
        "info":   "bold bright_blue",
        "accent": "bright_blue",
    },
}

console = Console(theme=Theme(PALETTES["light"]))


def use_theme(name: str = "light"):
    """Swap the palette of the shared console; unknown names fall back to light."""
    console.push_theme(Theme(PALETTES.get(name, PALETTES["light"])))


def setup_logging(debug: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=debug, rich_tracebacks=True)],
        force=True,
    )
    # requests' own connection chatter is noise unless debugging
    logging.getLogger("urllib3").setLevel(logging.DEBUG if debug else logging.WARNING)


def info_panel(title: str, msg: str, style: str = "cyan"):
    console.print(Panel.fit(Text(msg, no_wrap=False), title=title, border_style=style))


def error_panel(title: str, msg: str):
    info_panel(title, msg, style="red")


def success_panel(title: str, msg: str):
    info_panel(title, msg, style="accent")


def print_rule(title: Optional[str] = None):
    if title:
        console.rule(f"[info]{title}[/info]")
    else:
        console.rule()
