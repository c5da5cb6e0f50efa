class ShapeMismatch(ValueError):
    """Raised when a vector or parameter buffer does not have the width a layer,
    network or optimizer expects."""

    def __init__(self, message: str, expected=None, actual=None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual
