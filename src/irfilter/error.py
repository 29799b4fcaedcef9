class UsageError(ValueError):
    """
    raised when the command line arguments are missing or invalid
    """

    pass


class SourceError(Exception):
    """
    raised when the input cannot be opened or read, or its content is malformed
    """

    pass


class SinkError(Exception):
    """
    raised when the output destination cannot be created, written or finalized
    """

    pass
