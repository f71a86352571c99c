"""Errors raised while configuring an automaton run."""


class ECAError(ValueError):
    """Base class for configuration errors reported to the user."""


class InvalidRule(ECAError):
    pass


class InvalidInitialConfiguration(ECAError):
    pass


class InvalidEdgeMode(ECAError):
    pass


class EmptyRow(ECAError):
    pass


class TerminalSizeUnavailable(ECAError):
    pass


class ConfigError(ECAError):
    """Invalid generation count, delay or density."""
