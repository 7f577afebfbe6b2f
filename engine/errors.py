class MachineError(Exception):
    """Base class for every error raised by the execution engine."""


# === Construction errors ===
class ConstructionError(MachineError):
    """A machine could not be built from its configuration."""

    def __init__(self, message, rule=None, index=None):
        super().__init__(message)
        self.rule = rule
        self.index = index


class InvalidState(ConstructionError):
    pass


class InvalidSymbol(ConstructionError):
    pass


class InvalidHeadAction(ConstructionError):
    pass


class EmptyField(ConstructionError):
    pass


class DuplicateRule(ConstructionError):
    pass


class InvalidHeadIndex(ConstructionError):
    pass


# === Step errors ===
class StepError(MachineError):
    """advance() could not perform the next phase transition."""

    def __init__(self, message, state=None, symbol=None):
        super().__init__(message)
        self.state = state
        self.symbol = symbol


class MissingState(StepError):
    pass


class MissingRule(StepError):
    pass
