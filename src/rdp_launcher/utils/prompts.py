from typing import Callable, Generic, Sequence, TextIO, TypeVar

from rich.console import Console, RenderableType
from rich.markup import escape
from rich.prompt import InvalidResponse, Prompt

T = TypeVar("T")

ADD_INDEX = -1  # index returned when the operator typed a new value


def plain(item: object) -> str:
    return escape(str(item))


def checked(item: object) -> str:
    return f"[green]✔[/green] [bold]{escape(str(item))}[/bold]"


class PromptCancelledError(Exception):
    """Raised when the operator cancels a prompt or its input stream is closed."""


def read_line(console: Console, prompt: str, *, stream: TextIO | None = None) -> str:
    """Read one line of input, raising `PromptCancelledError` on Ctrl-C or end of input."""

    try:
        line = console.input(prompt, stream=stream)
    except (KeyboardInterrupt, EOFError) as e:
        raise PromptCancelledError("Prompt cancelled") from e

    # a stream returns "" (not "\n") once exhausted
    if stream is not None and line == "":
        raise PromptCancelledError("Input stream closed")

    return line.rstrip("\r\n")


class SelectPrompt(Generic[T]):
    """
    Interactive selection from a list of items, rendered with `rich`.

    The prompt shows a window of `size` items around the cursor and an optional details panel for
    the highlighted item. Input lines are interpreted as:

    - empty line: pick the highlighted item
    - `j` / `k`: move the cursor down / up
    - a number: pick the item with that number
    - `/text`: only show items accepted by `searcher`, `/` alone clears the search

    If `add_label` is given, an extra first entry lets the operator type a value of their own.
    """

    def __init__(
        self,
        *,
        label: str,
        items: Sequence[T],
        active: Callable[[T], str] = plain,
        inactive: Callable[[T], str] = plain,
        selected: Callable[[T], str] = checked,
        details: Callable[[T], RenderableType] | None = None,
        searcher: Callable[[str, int], bool] | None = None,
        size: int = 4,
        add_label: str | None = None,
        console: Console | None = None,
        stream: TextIO | None = None,
    ):
        self.label = label
        self.items = list(items)
        self.active = active
        self.inactive = inactive
        self.selected = selected
        self.details = details
        self.searcher = searcher
        self.size = max(size, 1)
        self.add_label = add_label
        self.console = console or Console()
        self.stream = stream

    def candidates(self, query: str) -> list[int]:
        """Indices of the items shown for the search `query`, with `ADD_INDEX` first if enabled."""

        indices = list(range(len(self.items)))
        if query and self.searcher:
            indices = [i for i in indices if self.searcher(query, i)]

        if self.add_label is not None:
            indices.insert(0, ADD_INDEX)

        return indices

    def _render_row(self, index: int, *, is_active: bool) -> str:

        if index == ADD_INDEX:
            return f"[magenta]{escape(self.add_label)}[/magenta]"

        item = self.items[index]
        return self.active(item) if is_active else self.inactive(item)

    def render(self, candidates: list[int], cursor: int, query: str) -> None:

        hints = "Enter:select j/k:move /text:search" if self.searcher else "Enter:select j/k:move"
        self.console.print(f"[blue]?[/blue] {self.label} - [dim]{hints}[/dim]")
        if query:
            self.console.print(f"[dim]Search:[/dim] {escape(query)}")

        if not candidates:
            self.console.print("  [dim]No results[/dim]")
            return

        # scroll the window so the cursor is always visible
        start = min(max(cursor - self.size + 1, 0), max(len(candidates) - self.size, 0))
        for pos in range(start, min(start + self.size, len(candidates))):
            is_active = pos == cursor
            marker = "▸" if is_active else " "
            self.console.print(f"{marker} {pos + 1:>2}. {self._render_row(candidates[pos], is_active=is_active)}")

        if self.details and candidates[cursor] != ADD_INDEX:
            self.console.print(self.details(self.items[candidates[cursor]]))

    def ask_new_value(self) -> str:

        while True:
            value = read_line(self.console, f"{self.label}: ", stream=self.stream).strip()
            if value:
                return value
            self.console.print("[prompt.invalid]Please enter a value")

    def run(self) -> tuple[int, str]:
        """
        Run the prompt until an item is picked.

        Returns:
            The index of the picked item (or `ADD_INDEX`) and its value as text.

        Raises:
            PromptCancelledError: If the prompt is cancelled or input ends.
        """

        query, cursor = "", 0
        while True:

            candidates = self.candidates(query)
            cursor = min(cursor, max(len(candidates) - 1, 0))
            self.render(candidates, cursor, query)

            answer = read_line(self.console, "> ", stream=self.stream).strip()

            if answer == "" and candidates:
                index = candidates[cursor]
                break
            elif answer == "j":
                cursor = min(cursor + 1, max(len(candidates) - 1, 0))
            elif answer == "k":
                cursor = max(cursor - 1, 0)
            elif answer.startswith("/") and self.searcher:
                query, cursor = answer[1:].strip(), 0
            elif answer.isdecimal() and 1 <= int(answer) <= len(candidates):
                index = candidates[int(answer) - 1]
                break
            else:
                self.console.print(f"[prompt.invalid]Invalid choice {escape(repr(answer))}")

        if index == ADD_INDEX:
            value = self.ask_new_value()
            self.console.print(checked(value))
            return ADD_INDEX, value

        item = self.items[index]
        self.console.print(self.selected(item))
        return index, str(item)


class PasswordPrompt(Prompt):
    """Masked password prompt that rejects passwords shorter than `min_length`."""

    min_length = 6

    def process_response(self, value: str) -> str:

        # passwords are taken as typed, surrounding whitespace included
        if len(value) < self.min_length:
            raise InvalidResponse(f"[prompt.invalid]Password must have at least {self.min_length} characters")

        return value


def ask_password(*, label: str = "Password", console: Console | None = None) -> str:
    """Ask for a password with masked input, raising `PromptCancelledError` if cancelled."""

    try:
        return PasswordPrompt.ask(label, console=console, password=True)
    except (KeyboardInterrupt, EOFError) as e:
        raise PromptCancelledError("Password prompt cancelled") from e
