"""
Exceptions raised by the mapspace package.
"""


class ConfigurationError(ValueError):
    """
    Invalid workload, level structure or mapspace constraint.

    Raised while a space is being initialized. These are never recoverable:
    the enumeration is aborted and the message names the offending
    dimension, level or value.
    """
