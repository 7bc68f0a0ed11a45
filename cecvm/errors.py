"""Exceptions raised by the identification stages and the CVM solver."""


class InvalidInputError(ValueError):
    """Raised when the caller passes data that violates a contract."""

    def __init__(self, msg):
        super(InvalidInputError, self).__init__(msg)


class SingularMatrixError(InvalidInputError):
    """Raised when a linear system or an inversion has a vanishing pivot."""

    def __init__(self, msg):
        super(SingularMatrixError, self).__init__(msg)


class InconsistencyError(RuntimeError):
    """Raised when the output of an earlier stage contradicts itself."""

    def __init__(self, msg):
        super(InconsistencyError, self).__init__(msg)
