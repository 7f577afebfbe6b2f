# tools/render.py

from rich.console import Group
from rich.table import Table
from rich.text import Text

from engine.step_engine import PHASE_DESCRIPTIONS, Phase

PHASE_STYLES = {
    Phase.NORMAL: "white",
    Phase.HALTED: "bold red",
    Phase.READ_STATE: "green",
    Phase.READ_SYMBOL: "bold green",
    Phase.CLEAR_SYMBOL: "bold magenta",
    Phase.WRITE_SYMBOL: "bold cyan",
    Phase.MOVE_HEAD: "green",
    Phase.MOVED_HEAD: "green",
    Phase.MOVE_STATE: "yellow",
}

# Phases that highlight the cell under the head
HEAD_CELL_PHASES = (Phase.READ_SYMBOL, Phase.CLEAR_SYMBOL, Phase.WRITE_SYMBOL)


def render_tape(engine):
    """Tape strip with one extra empty cell drawn on each side and the head marker below."""
    symbols = engine.tape.snapshot()
    head = engine.tape.head
    empty = str(engine.empty_symbol)

    strip = Text()
    marker = Text()
    cells = [(empty, None)] + [(str(s), i) for i, s in enumerate(symbols)] + [(empty, None)]
    for symbol, index in cells:
        style = "dim" if index is None else ""
        if index == head and engine.phase in HEAD_CELL_PHASES:
            style = f"reverse {PHASE_STYLES[engine.phase]}"
        strip.append(f" {symbol} ", style=style)
        strip.append("|", style="dim")
        marker.append(f" {engine.head_op} " if index == head else "   ")
        marker.append(" ")
    return Group(strip, marker)


def render_operation(engine):
    text = Text()
    text.append(f"{engine.op_counter:>5} ", style="bold")
    text.append(PHASE_DESCRIPTIONS[engine.phase], style=PHASE_STYLES[engine.phase])
    return text


def _rule_styles(engine, rule):
    """(from_symbol style, to_symbol style, row style) for one rule row."""
    if rule.from_state != engine.current_state:
        return "", "", ""
    if engine.read_symbol is None:
        return "", "", "bold" if engine.phase is not Phase.HALTED else ""
    if engine.read_symbol != rule.from_symbol:
        return "", "", ""

    phase = engine.phase
    from_style = ""
    if phase is Phase.READ_SYMBOL:
        from_style = PHASE_STYLES[Phase.READ_SYMBOL]
    elif phase in (Phase.CLEAR_SYMBOL, Phase.WRITE_SYMBOL, Phase.MOVE_HEAD, Phase.MOVED_HEAD):
        from_style = PHASE_STYLES[Phase.CLEAR_SYMBOL]

    to_style = ""
    if phase in (Phase.WRITE_SYMBOL, Phase.MOVE_HEAD, Phase.MOVED_HEAD):
        to_style = PHASE_STYLES[Phase.WRITE_SYMBOL]

    row_style = {
        Phase.MOVE_HEAD: "on dark_green",
        Phase.MOVED_HEAD: "on dark_green",
        Phase.MOVE_STATE: "on yellow4",
        Phase.NORMAL: "",
    }.get(phase, "bold")
    return from_style, to_style, row_style


def render_rules(engine):
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Current state", justify="center")
    table.add_column("Scanned symbol", justify="center")
    table.add_column("Print symbol", justify="center")
    table.add_column("Move tape", justify="center")
    table.add_column("Next state", justify="center")

    for rule in engine.rule_table.rules:
        from_style, to_style, row_style = _rule_styles(engine, rule)
        table.add_row(
            str(rule.from_state),
            Text(str(rule.from_symbol), style=from_style),
            Text(str(rule.to_symbol), style=to_style),
            str(rule.head_action),
            str(rule.to_state),
            style=row_style,
        )

    # trailing halt rows
    for halt in engine.halt_states:
        style = ""
        if engine.current_state == halt:
            style = "bold red" if engine.halted else "bold"
        table.add_row(Text(f"{halt} (halt)", style=style), "", "", "", "")

    return table


def render_machine(engine):
    return Group(render_operation(engine), render_tape(engine), render_rules(engine))
