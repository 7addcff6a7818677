class SlopesError(Exception):
    """Base class for every error raised by pyslopes."""


class InvalidParameter(SlopesError, ValueError):
    """
    A user-facing value is malformed: a slider outside 0-100, a non-finite
    number, a broken peaks curve or a seed outside the 16-bit range.
    """


class InvalidConfiguration(SlopesError, ValueError):
    """
    A structural value would make the generator divide by zero or loop
    forever (zero rows, zero samples, degenerate normalize range, bad canvas).
    """


class ExportError(SlopesError, RuntimeError):
    """
    Serialization, rasterization or file output failed.
    Already generated geometry is untouched, so the caller may retry.
    """
