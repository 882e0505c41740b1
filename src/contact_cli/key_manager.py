from typing import Callable, List, Tuple

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.lexers import PygmentsLexer
from prompt_toolkit.styles import Style
from pygments.lexers.markup import MarkdownLexer


# ========== Key bindings ==========
class KeyBindingManager:
    """
    Bindings for the multi-line message box. Enter inserts a newline, the
    submit keys hand the buffer back, Ctrl+C clears the current form.
    """

    SUBMIT_KEYS = (
        (("escape", "enter"), "Esc+Enter"),
        (("c-j",), "Ctrl+J"),
    )

    def __init__(self, accept_callback: Callable[[], None], clear_callback: Callable[[], None]):
        self.accept_callback = accept_callback
        self.clear_callback = clear_callback
        self.bindings = KeyBindings()
        self.submit_labels: List[str] = []
        self._register()

    def _register(self):
        for keys, label in self.SUBMIT_KEYS:
            self.bindings.add(*keys)(self._on_submit)
            self.submit_labels.append(label)
        self.bindings.add("c-c")(self._on_clear)

    def _on_submit(self, event):
        self.accept_callback()

    def _on_clear(self, event):
        self.clear_callback()


# ========== Prompt session ==========
class SessionFactory:
    STYLE = Style.from_dict({
        "counter": "ansicyan bold",
        "field":   "ansimagenta",
        "arrow":   "ansibrightblack",
    })

    @staticmethod
    def build_session(bindings: KeyBindings) -> PromptSession:
        return PromptSession(
            multiline=True,
            key_bindings=bindings,
            lexer=PygmentsLexer(MarkdownLexer),
            style=SessionFactory.STYLE,
            prompt_continuation=lambda width, line_number, is_soft_wrap: "." * (width - 1) + " ",
        )

    @staticmethod
    def build_line_session() -> PromptSession:
        return PromptSession(style=SessionFactory.STYLE)

    @staticmethod
    def make_prompt_fragments(counter: int, field: str = "message") -> FormattedText:
        parts: List[Tuple[str, str]] = [
            ("class:counter", f"[{counter}] "),
            ("class:field", field),
            ("class:arrow", " > "),
        ]
        return FormattedText(parts)
