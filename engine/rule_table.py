from enum import Enum
from typing import NamedTuple

from engine.errors import (
    DuplicateRule, EmptyField, InvalidHeadAction, InvalidState, InvalidSymbol,
)

RULE_FIELDS = ("from_state", "from_symbol", "to_symbol", "head_action", "to_state")

# Field name -> wording used in validation messages
FIELD_NAMES = {
    "from_state": "Current",
    "from_symbol": "Scanned",
    "to_symbol": "Printed",
    "head_action": "Move",
    "to_state": "Next",
}


class HeadAction(Enum):
    LEFT = "L"
    RIGHT = "R"
    STAY = "N"

    @property
    def marker(self):
        return {"L": "<", "R": ">", "N": "-"}[self.value]


class Rule(NamedTuple):
    from_state: str
    from_symbol: str
    to_symbol: str
    head_action: str
    to_state: str


class Transition(NamedTuple):
    to_state: str
    to_symbol: str
    head_action: str


def is_empty(value):
    return value is None or value == ""


def _unique(values):
    """Drop empty tokens and duplicates, keeping first-appearance order."""
    return list(dict.fromkeys(v for v in values if not is_empty(v)))


def _as_fields(raw):
    if isinstance(raw, str):
        return [field.strip() for field in raw.split(",")]
    return list(raw)


class RuleTable:
    """Lookup table state -> symbol -> Transition compiled from a rule list.

    Strict tables validate every rule and raise a ConstructionError subclass on
    the first violation. Permissive tables accept anything (missing fields,
    unknown head actions, duplicates) so that a half-typed machine can still be
    drawn.
    """

    def __init__(self, rules, table, states, symbols, strict,
                 declared_states=None, declared_symbols=None):
        self._rules = rules
        self._table = table
        self._states = states
        self._symbols = symbols
        self._declared_states = declared_states
        self._declared_symbols = declared_symbols
        self.strict = strict

    @classmethod
    def build(cls, rules, declared_states=None, declared_symbols=None, strict=True):
        valid_states = None if declared_states is None else _unique(declared_states)
        valid_symbols = None if declared_symbols is None else _unique(declared_symbols)

        table = {}
        normalized = []
        for index, raw in enumerate(rules):
            fields = _as_fields(raw)
            if strict:
                if len(fields) != len(RULE_FIELDS):
                    raise EmptyField(
                        f"Rule {index + 1} has {len(fields)} fields, expected {len(RULE_FIELDS)}",
                        rule=tuple(fields), index=index)
            else:
                fields = (fields + [""] * len(RULE_FIELDS))[:len(RULE_FIELDS)]
                fields = ["" if f is None else f for f in fields]

            rule = Rule(*fields)
            if strict:
                _validate_rule(rule, index, valid_states, valid_symbols)

            from_table = table.setdefault(rule.from_state, {})
            if strict and rule.from_symbol in from_table:
                raise DuplicateRule(
                    f"There already is a rule for state='{rule.from_state}' symbol='{rule.from_symbol}'",
                    rule=rule, index=index)
            from_table[rule.from_symbol] = Transition(rule.to_state, rule.to_symbol, rule.head_action)
            normalized.append(rule)

        if valid_states is None:
            states = _unique(s for r in normalized for s in (r.from_state, r.to_state))
        else:
            states = valid_states
        if valid_symbols is None:
            symbols = _unique(s for r in normalized for s in (r.from_symbol, r.to_symbol))
        else:
            symbols = valid_symbols

        return cls(normalized, table, states, symbols, strict,
                   declared_states=valid_states, declared_symbols=valid_symbols)

    # === Lookup ===
    def get(self, state, symbol):
        return self._table.get(state, {}).get(symbol)

    def has_state(self, state):
        return state in self._table

    def transitions_from(self, state):
        return dict(self._table.get(state, {}))

    @property
    def rules(self):
        return list(self._rules)

    @property
    def states(self):
        return list(self._states)

    @property
    def symbols(self):
        return list(self._symbols)

    @property
    def declared_states(self):
        """Explicitly declared state set, or None when it was inferred."""
        return None if self._declared_states is None else list(self._declared_states)

    @property
    def declared_symbols(self):
        return None if self._declared_symbols is None else list(self._declared_symbols)

    def __len__(self):
        return len(self._rules)

    def __repr__(self):
        mode = "strict" if self.strict else "permissive"
        return f"RuleTable({len(self._rules)} rules, {len(self._states)} states, {mode})"


def check_state(state, name, valid_states=None, rule=None, index=None):
    if is_empty(state):
        raise EmptyField(f"{name} state is empty", rule=rule, index=index)
    if valid_states is not None and state not in valid_states:
        raise InvalidState(
            f"{name} state '{state}' is not valid. Choose from: {', '.join(valid_states)}",
            rule=rule, index=index)


def check_symbol(symbol, name, valid_symbols=None, rule=None, index=None):
    if is_empty(symbol):
        raise EmptyField(f"{name} symbol is empty", rule=rule, index=index)
    if not isinstance(symbol, str) or len(symbol) != 1:
        raise InvalidSymbol(
            f"Invalid {name} symbol '{symbol}'. Symbols must be exactly one character",
            rule=rule, index=index)
    if valid_symbols is not None and symbol not in valid_symbols:
        raise InvalidSymbol(
            f"Invalid {name} symbol '{symbol}'. Choose from: {', '.join(valid_symbols)}",
            rule=rule, index=index)


def check_head_action(action, rule=None, index=None):
    if is_empty(action):
        raise EmptyField(f"{FIELD_NAMES['head_action']} action is empty", rule=rule, index=index)
    try:
        HeadAction(action)
    except ValueError:
        choices = ", ".join(a.value for a in HeadAction)
        raise InvalidHeadAction(
            f"Invalid action '{action}'. Choose from: {choices}", rule=rule, index=index) from None


def _validate_rule(rule, index, valid_states, valid_symbols):
    check_state(rule.from_state, FIELD_NAMES["from_state"], valid_states, rule, index)
    check_state(rule.to_state, FIELD_NAMES["to_state"], valid_states, rule, index)
    check_symbol(rule.from_symbol, FIELD_NAMES["from_symbol"], valid_symbols, rule, index)
    check_symbol(rule.to_symbol, FIELD_NAMES["to_symbol"], valid_symbols, rule, index)
    check_head_action(rule.head_action, rule, index)
