"""
Exception used to stop a batch run once its errors have been reported.
"""


class InstrumentationAbort(Exception):
    """Raised by ``ErrorHandler.finalize`` when any unit failed.

    Example:
        with handler.statusManager():
            ...
            handler.finalize()
    """
    pass
