"""Interactive console prompts built on rich."""

from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from easy_patcher.models import (
    ActionResult,
    PatchOutput,
    Project,
    ProjectChangeSet,
    RevisionRecord,
)
from easy_patcher.patch.change_set import summarize_change_set

BACK_CHOICE = "0"
ALL_KEYWORDS = frozenset({"a", "all", "*"})


def parse_selection(raw: str, count: int) -> list[int]:
    """Parse a multi-selection such as "1,3-5" into zero-based indices.

    "all" selects every item; an empty answer selects nothing. Indices are
    returned in ascending order without duplicates.

    Raises:
        ValueError: On a malformed token or a number outside 1..count.
    """
    text = raw.strip().lower()
    if not text:
        return []
    if text in ALL_KEYWORDS:
        return list(range(count))

    picked: set[int] = set()
    for token in text.replace(" ", ",").split(","):
        if not token:
            continue
        if "-" in token:
            start_text, _, end_text = token.partition("-")
            start, end = int(start_text), int(end_text)
            if start > end:
                raise ValueError(f"Invalid range '{token}'")
            numbers = range(start, end + 1)
        else:
            numbers = range(int(token), int(token) + 1)
        for number in numbers:
            if not 1 <= number <= count:
                raise ValueError(f"{number} is outside 1..{count}")
            picked.add(number - 1)
    return sorted(picked)


class ConsolePrompter:
    """Menu, selection and confirmation prompts for the operator."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def select(self, title: str, options: list[str], back: bool = True) -> int | None:
        """Pick one option by number. Returns None for "Back"."""
        self.console.rule(title)
        for number, option in enumerate(options, start=1):
            self.console.print(f"  [bold]{number}[/bold]) {option}")
        choices = [str(number) for number in range(1, len(options) + 1)]
        if back:
            self.console.print(f"  [bold]{BACK_CHOICE}[/bold]) Back")
            choices.append(BACK_CHOICE)
        answer = Prompt.ask("Choice", console=self.console, choices=choices, show_choices=False)
        if answer == BACK_CHOICE:
            return None
        return int(answer) - 1

    def multi_select(self, title: str, options: list[str]) -> list[int]:
        """Pick any number of options; empty input selects none."""
        self.console.rule(title)
        for number, option in enumerate(options, start=1):
            self.console.print(f"  [bold]{number:>3}[/bold]) {option}")
        while True:
            raw = Prompt.ask(
                "Select (e.g. 1,3-5, 'all', empty for none)",
                console=self.console,
                default="",
                show_default=False,
            )
            try:
                return parse_selection(raw, len(options))
            except ValueError as exc:
                self.notice(f"Invalid selection: {exc}")

    def confirm(self, question: str, default: bool = False) -> bool:
        return Confirm.ask(question, console=self.console, default=default)

    def ask_text(self, prompt: str, default: str = "") -> str:
        return Prompt.ask(prompt, console=self.console, default=default, show_default=bool(default))

    def notice(self, message: str, style: str = "yellow") -> None:
        self.console.print(f"[{style}]{message}[/{style}]")

    def show_change_sets(
        self,
        entries: list[tuple[Project, list[RevisionRecord], ProjectChangeSet]],
    ) -> None:
        for project, revisions, change_set in entries:
            table = Table(title=f"{project.path} ({project.vcs_kind.value})")
            table.add_column("Change")
            table.add_column("Path")
            for path in sorted(change_set):
                entry = change_set[path]
                shown = f"{entry.old_path} -> {path}" if entry.old_path else path
                table.add_row(entry.change_kind.value, shown)
            self.console.print(table)
            labels = ", ".join(revision.label for revision in revisions)
            self.console.print(f"Revisions: {labels}")
            counts = summarize_change_set(change_set)
            self.console.print(
                ", ".join(f"{kind}: {count}" for kind, count in counts.items() if count)
            )

    def show_outputs(self, outputs: list[PatchOutput]) -> None:
        table = Table(title="Patch packages")
        table.add_column("Project")
        table.add_column("Output")
        table.add_column("Notes")
        for output in outputs:
            notes = []
            if output.artifact_warning:
                notes.append(f"artifact skipped: {output.artifact_warning}")
            if output.missing_files:
                notes.append(f"{len(output.missing_files)} missing files")
            table.add_row(output.project_path, output.output_dir, "; ".join(notes))
        self.console.print(table)

    def show_action_results(self, results: list[ActionResult]) -> None:
        table = Table(title="Actions")
        table.add_column("Command")
        table.add_column("Source")
        table.add_column("Result")
        for result in results:
            status = "[green]ok[/green]" if result.success else "[red]failed[/red]"
            table.add_row(result.command.value, result.source, f"{status} {result.message}")
        self.console.print(table)
