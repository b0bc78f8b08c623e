class WildcamTvError(Exception):
    pass


class StackRetrievalError(WildcamTvError):
    """Raised by a data adapter when a stack could not be retrieved."""
