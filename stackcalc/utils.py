import enum
import math


class PrintableEnum(enum.Enum):
    def __str__(self) -> str:
        return self.name

    __repr__ = __str__


def format_number(value: float) -> str:
    """Fixed notation with six decimals, same as C++ std::to_string(double)"""
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return f"{value:f}"
