class RailscopError(Exception):
    """Base class for errors surfaced to the command line."""


class PatternSyntaxError(RailscopError, ValueError):
    """A node pattern could not be compiled."""

    def __init__(self, message: str, source: str, position: int):
        self.source = source
        self.position = position
        super().__init__(f"{message} in pattern {source!r} (token {position})")


class UnknownRuleError(RailscopError):
    pass
