"""Root of the engine's exception hierarchy.

Concrete errors are declared next to the code that raises them. Anything
deriving from ``BookingEngineError`` is a hard failure that aborts the
booking attempt; business rejections are returned as values instead.
"""


class BookingEngineError(Exception):
    """Base class for all hard failures raised by the engine."""
