from typing import Iterable, Optional, Literal, TypeAlias

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from xor_tickler.keysize import KeysizeCandidate
from xor_tickler.state_queue import SingleSlotQueue
from xor_tickler.state_snapshot import AttackSnapshot


COLORS = {
    "current_byte": "bold yellow on black",
    "key": {
        "unsolved": "dark_red",
        "solved": "bright_red",
    },
}

ByteState: TypeAlias = Literal["unsolved", "solved", "current"]


def printable_char(value: int) -> str:
    """Show a byte as its ASCII character, or a dot when it isn't printable."""
    if 0x20 <= value <= 0x7E:
        return chr(value)
    return "."


def byte_to_string(value: Optional[int], byte_state: ByteState) -> str:
    """Convert a key byte to hex and apply coloring."""
    text = "??" if value is None else f"{value:02x}"
    if byte_state == "current":
        style = COLORS["current_byte"]
    elif byte_state in ("solved", "unsolved"):
        style = COLORS["key"][byte_state]
    else:
        raise ValueError(f"Invalid byte state: {byte_state}")
    return f"[{style}]{text}[/{style}]"


def render(state: Optional[AttackSnapshot]):
    """Render the attack state snapshot."""
    if state is None:
        return Panel("Waiting for first update…", title="Repeating-key XOR", border_style="dim")

    if len(state.key) != state.keysize:
        raise ValueError("Snapshot key length must match its keysize")

    title = (
        f"Keysize {state.keysize}  |  Candidate {state.candidate_index + 1} / {state.candidate_count}"
        f"  |  {state.solved_columns} / {state.keysize} columns  |  v{state.state_version}"
    )
    if state.complete:
        title += "  |  done"

    ui_table = Table(title=title)
    ui_table.add_column("Column", justify="right")
    ui_table.add_column("Key byte")
    ui_table.add_column("Char")
    ui_table.add_column("Score", justify="right")

    for column_index, key_byte in enumerate(state.key):
        if key_byte is None:
            byte_state = "unsolved"
        elif column_index == state.column_index and not state.complete:
            byte_state = "current"
        else:
            byte_state = "solved"

        score = state.column_scores[column_index] if column_index < len(state.column_scores) else None
        ui_table.add_row(
            str(column_index),
            byte_to_string(key_byte, byte_state),
            "" if key_byte is None else escape(printable_char(key_byte)),
            "" if score is None else f"{score:.4f}",
        )

    return ui_table


def ui_loop(state_queue: SingleSlotQueue[AttackSnapshot], console: Optional[Console] = None) -> None:
    """Loop the UI until the queue is closed."""
    console = console or Console(stderr=True)
    with Live(render(None), refresh_per_second=30, screen=False, console=console) as live:
        while True:
            state = state_queue.get()
            if state is None:
                break
            live.update(render(state))


def render_keysizes(candidates: Iterable[KeysizeCandidate]) -> Table:
    """Table of keysize candidates, in the order given (best first)."""
    table = Table(title="Keysize candidates")
    table.add_column("Rank", justify="right", style="dim")
    table.add_column("Size", justify="right", style="cyan")
    table.add_column("Score", justify="right", style="green")
    for rank, candidate in enumerate(candidates, start=1):
        score = f"{candidate.score:.6f}" if candidate.ranked else "n/a"
        table.add_row(str(rank), str(candidate.size), score)
    return table

