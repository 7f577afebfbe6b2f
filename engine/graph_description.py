"""
Graphviz (DOT) description of a machine's rule set.

describe() is a pure function of the rule table and the engine's current
state. It never raises on incomplete rules, so a permissive table built from a
half-written machine still yields a drawable graph.
"""
from engine.rule_table import is_empty

# Fill colour of the current state, keyed by phase value
PHASE_COLORS = {
    "normal": "lightgrey",
    "halted": "orangered",
    "read_state": "green",
    "read_symbol": "green",
    "clear_symbol": "green",
    "write_symbol": "green",
    "move_head": "green",
    "moved_head": "green",
    "move_state": "yellow",
}

MISSING = "?"
START_NODE = "start"


def quote(token):
    text = str(token).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def _field(value):
    return MISSING if is_empty(value) else str(value)


def edge_label(rule):
    """`a → b, R`; the arrow target is dropped when the symbol is unchanged."""
    from_symbol = _field(rule.from_symbol)
    to_symbol = _field(rule.to_symbol)
    action = _field(rule.head_action)
    if from_symbol == to_symbol and from_symbol != MISSING:
        return f"{from_symbol}, {action}"
    return f"{from_symbol} → {to_symbol}, {action}"


def describe(rule_table, states, halt_states, start_state, current_state, active_phase):
    phase = getattr(active_phase, "value", active_phase)
    halt_states = [h for h in halt_states if not is_empty(h)]
    lines = ["digraph {"]

    for state in states:
        if is_empty(state) or state in halt_states:
            continue
        lines.append(f"  {quote(state)} [shape=circle];")
    for state in halt_states:
        lines.append(f"  {quote(state)} [shape=doublecircle];")

    # synthetic entry arrow
    lines.append(f"  {quote(START_NODE)} [shape=none];")
    if not is_empty(start_state):
        lines.append(f"  {quote(START_NODE)} -> {quote(start_state)};")

    if not is_empty(current_state):
        color = PHASE_COLORS.get(phase, PHASE_COLORS["normal"])
        lines.append(f"  {quote(current_state)} [fillcolor={color}, style=filled];")

    for rule in rule_table.rules:
        if is_empty(rule.from_state) or is_empty(rule.to_state):
            continue
        lines.append(
            f"  {quote(rule.from_state)} -> {quote(rule.to_state)} [label={quote(edge_label(rule))}];")

    lines.append("}")
    return "\n".join(lines) + "\n"
