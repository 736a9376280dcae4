class DefinitionParseError(ValueError):
    """Raised when a line of a machine definition cannot be accepted."""

    def __init__(self, line_number, line, reason=None):
        self.line_number = line_number
        self.line = line
        self.reason = reason or "Unable to parse line"
        super().__init__(f"{self.reason} (line no. {line_number}: {line})")


class StateNotFoundError(LookupError):
    def __init__(self, state_id):
        self.state_id = state_id
        super().__init__(f"State {state_id} is not part of the configuration.")


class TransitionNotFoundError(LookupError):
    def __init__(self, state_id, symbol):
        self.state_id = state_id
        self.symbol = symbol
        super().__init__(f"State {state_id} has no transition for symbol {symbol!r}.")


class DecodeError(ValueError):
    """Raised when a binary configuration is truncated or malformed."""
