"""
Error hierarchy for the conversion pipeline. Each stage raises one of these and
the command line maps it to a process exit code.
"""


class LithophaneError(Exception):
    exit_code = 1


class InputImageError(LithophaneError):
    """The source image is missing or cannot be decoded."""
    exit_code = 1


class ConfigurationError(LithophaneError):
    """A configuration value is out of range."""
    exit_code = 2


class DegenerateInputError(LithophaneError):
    """The input cannot produce a printable mesh."""
    exit_code = 3


class StlWriteError(LithophaneError):
    """The STL destination could not be written, seeked or closed."""
    exit_code = 4
