from enum import Enum

from engine.errors import MissingRule, MissingState
from engine.graph_description import describe
from engine.rule_table import (
    HeadAction, Rule, RuleTable, check_state, check_symbol, is_empty,
)
from engine.tape import Tape


class Phase(Enum):
    NORMAL = "normal"
    READ_STATE = "read_state"
    READ_SYMBOL = "read_symbol"
    CLEAR_SYMBOL = "clear_symbol"
    WRITE_SYMBOL = "write_symbol"
    MOVE_HEAD = "move_head"
    MOVED_HEAD = "moved_head"
    MOVE_STATE = "move_state"
    HALTED = "halted"


PHASE_DESCRIPTIONS = {
    Phase.NORMAL: "At state",
    Phase.HALTED: "Halted",
    Phase.READ_STATE: "Read current state",
    Phase.READ_SYMBOL: "Read current symbol",
    Phase.CLEAR_SYMBOL: "Cleared symbol",
    Phase.WRITE_SYMBOL: "Wrote symbol",
    Phase.MOVE_HEAD: "Moving head",
    Phase.MOVED_HEAD: "Head moved",
    Phase.MOVE_STATE: "Going to next state",
}

HEAD_IDLE = "^"


class StepEngine:
    """Turing machine driven one micro-step (phase) at a time.

    Every call to advance() enters exactly one new phase; eight calls make one
    macro-step (read, match, write, move, change state). A driver calls
    advance() until it returns False, rendering the engine between calls.

    Usage:
        engine = StepEngine.from_config(config)
        while engine.advance():
            draw(engine.tape.snapshot(), engine.describe())
    """

    def __init__(self, rule_table, start, empty_symbol, halt_states=(), tape=None, head=0):
        strict = rule_table.strict
        if isinstance(halt_states, str):
            halt_states = [halt_states]
        halt_states = [h for h in halt_states if not is_empty(h)] if not strict else list(halt_states)
        cells = list(tape) if tape else []

        if strict:
            valid_states = rule_table.declared_states
            valid_symbols = rule_table.declared_symbols
            check_state(start, "Start", valid_states)
            for state in halt_states:
                check_state(state, "Halt", valid_states)
            check_symbol(empty_symbol, "Empty", valid_symbols)
            for cell in cells:
                check_symbol(cell, "Tape", valid_symbols)
        else:
            valid_symbols = None
            if cells and (head < 0 or head >= len(cells)):
                head = min(max(head, 0), len(cells) - 1)

        self.rule_table = rule_table
        self.start_state = start
        self.empty_symbol = empty_symbol
        self.halt_states = list(dict.fromkeys(halt_states))
        self._alphabet = valid_symbols
        self._initial_cells = cells
        self._initial_head = head

        # Build once so a bad head index fails construction, not the first reset
        self.tape = Tape(empty_symbol, cells, head, alphabet=valid_symbols)
        self._restore()

    @classmethod
    def from_config(cls, config, strict=True):
        """Build the rule table and engine from a machine configuration mapping."""
        empty_symbol = config.get("empty_symbol")
        rule_table = RuleTable.build(
            config.get("rules") or [],
            declared_states=config.get("states"),
            declared_symbols=config.get("symbols"),
            strict=strict,
        )
        return cls(
            rule_table,
            config.get("start"),
            empty_symbol,
            halt_states=config.get("halt") or (),
            tape=config.get("tape") or None,
            head=config.get("head", 0) or 0,
        )

    def _restore(self):
        self.tape = Tape(self.empty_symbol, self._initial_cells, self._initial_head,
                         alphabet=self._alphabet)
        self.current_state = self.start_state
        self.phase = Phase.NORMAL
        self.read_symbol = None
        self.head_op = HEAD_IDLE
        self.op_counter = 1
        self._transition = None
        self._matched_state = None

    def reset(self):
        """Return to the initial configuration. The rule table is kept."""
        self._restore()

    # === Derived sets ===
    @property
    def states(self):
        if self.rule_table.declared_states is not None:
            return self.rule_table.states
        extra = [self.start_state] + self.halt_states
        return list(dict.fromkeys(s for s in self.rule_table.states + extra if not is_empty(s)))

    @property
    def symbols(self):
        if self.rule_table.declared_symbols is not None:
            return self.rule_table.symbols
        extra = [self.empty_symbol] + list(self._initial_cells)
        return list(dict.fromkeys(s for s in self.rule_table.symbols + extra if not is_empty(s)))

    @property
    def halted(self):
        return self.phase is Phase.HALTED

    @property
    def active_rule(self):
        """Rule matched in the current macro-step, or None before the match."""
        if self._transition is None:
            return None
        to_state, to_symbol, head_action = self._transition
        return Rule(self._matched_state, self.read_symbol, to_symbol, head_action, to_state)

    # === Stepping ===
    def advance(self):
        """Enter the next phase. Returns False once the machine has halted."""
        phase = self.phase

        if phase is Phase.HALTED:
            return False

        if phase is Phase.NORMAL:
            if self.current_state in self.halt_states:
                self.phase = Phase.HALTED
                return True
            if not self.rule_table.has_state(self.current_state):
                raise MissingState(f"No rules for state '{self.current_state}'",
                                   state=self.current_state)
            self.read_symbol = None
            self._transition = None
            self.phase = Phase.READ_STATE

        elif phase is Phase.READ_STATE:
            self.read_symbol = self.tape.read()
            self.phase = Phase.READ_SYMBOL

        elif phase is Phase.READ_SYMBOL:
            transition = self.rule_table.get(self.current_state, self.read_symbol)
            if transition is None:
                raise MissingRule(
                    f"No action in state '{self.current_state}' for read symbol '{self.read_symbol}'",
                    state=self.current_state, symbol=self.read_symbol)
            self._transition = transition
            self._matched_state = self.current_state
            self.tape.write(transition.to_symbol)
            self.phase = Phase.CLEAR_SYMBOL

        elif phase is Phase.CLEAR_SYMBOL:
            self.head_op = self._head_action().marker
            self.phase = Phase.WRITE_SYMBOL

        elif phase is Phase.WRITE_SYMBOL:
            action = self._head_action()
            if action is HeadAction.LEFT:
                self.tape.move_left()
            elif action is HeadAction.RIGHT:
                self.tape.move_right()
            self.phase = Phase.MOVE_HEAD

        elif phase is Phase.MOVE_HEAD:
            self.phase = Phase.MOVED_HEAD

        elif phase is Phase.MOVED_HEAD:
            self.current_state = self._transition.to_state
            self.head_op = HEAD_IDLE
            self.phase = Phase.MOVE_STATE

        elif phase is Phase.MOVE_STATE:
            self.op_counter += 1
            self.phase = Phase.NORMAL

        return True

    def _head_action(self):
        try:
            return HeadAction(self._transition.head_action)
        except ValueError:
            # only reachable for permissive tables
            return HeadAction.STAY

    def run(self, max_steps=None):
        """Advance until halted or until `max_steps` more macro-steps completed.

        Returns True if the machine halted.
        """
        target = None if max_steps is None else self.op_counter + max_steps
        while target is None or self.op_counter < target:
            if not self.advance():
                return True
        return self.halted

    # === Views for renderers ===
    @property
    def description(self):
        return PHASE_DESCRIPTIONS[self.phase]

    def describe(self):
        return describe(self.rule_table, self.states, self.halt_states, self.start_state,
                        self.current_state, self.phase)

    def snapshot(self):
        return {
            "op_counter": self.op_counter,
            "phase": self.phase.value,
            "state": self.current_state,
            "head": self.tape.head,
            "head_op": self.head_op,
            "read_symbol": self.read_symbol,
            "tape": list(self.tape.snapshot()),
        }

    def __repr__(self):
        return (f"StepEngine(state={self.current_state!r}, phase={self.phase.value}, "
                f"op_counter={self.op_counter}, tape={self.tape!r})")
