from dataclasses import dataclass


@dataclass(frozen=True)
class Range:
    """Half-open [start, end) span of a source line"""

    start: int
    end: int

    def __post_init__(self) -> None:
        if not 0 <= self.start <= self.end:
            raise ValueError(f"Invalid range [{self.start}, {self.end})")

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class SourceContext:
    src: str

    def get_from_range(self, range_: Range) -> str:
        if range_.end > len(self.src):
            raise ValueError(f"Range [{range_.start}, {range_.end}) is out of source bounds ({len(self.src)})")
        return self.src[range_.start : range_.end]

    def __len__(self) -> int:
        return len(self.src)


@dataclass
class CalculatorError(Exception):
    errmsg: str
    code: str
    position: int

    stage = "Calculator error"

    def __str__(self) -> str:
        return f"[{self.stage}] {self.errmsg} (at offset {self.position})"

    def snippet(self) -> str:
        print_start_idx = max(0, self.position - 10)
        print_ellipsis_pre = print_start_idx > 0
        print_end_idx = min(len(self.code), self.position + 10)
        print_ellipsis_post = print_end_idx < len(self.code)
        return "\n".join(
            [
                (
                    ("..." if print_ellipsis_pre else "")
                    + f"{self.code[print_start_idx:print_end_idx]}"
                    + ("..." if print_ellipsis_post else "")
                ),
                " " * (self.position - print_start_idx + (3 if print_ellipsis_pre else 0)) + "^",
            ]
        )
