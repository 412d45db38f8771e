"""
Formatting utilities for human-readable output.
"""


def elapsedTime(t):
    """
    Format a time duration in seconds as a human-readable string.

    Args:
        t: Time duration in seconds (float)

    Returns:
        Formatted string with an appropriate unit (e.g. "12.5 ms", "3.2 s")
    """
    if t < 1.0:
        return "%5.4g ms" % (t * 1000.0)
    elif t < 60.0:
        return "%5.4g s" % (t)
    elif t < 3600.0:
        return "%5.4g m" % (t / 60.0)
    else:
        return "%5.4g h" % (t / 3600.0)
