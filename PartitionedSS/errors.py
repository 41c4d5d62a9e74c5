class ShapeError(ValueError):
    """Block matrices of a partitioned system have inconsistent sizes."""


class IncompatibleTimeError(ValueError):
    """Operands do not share a common time evolution (dt)."""


class DimensionMismatch(ValueError):
    """Partition sizes of the operands do not fit the interconnection."""
