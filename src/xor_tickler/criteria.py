"""Scoring criteria that rate how much a byte sequence looks like text."""
import re
import string
from typing import Callable, Protocol, runtime_checkable

from xor_tickler.utils import BytesLike

PRINTABLE_MIN = 0x20
PRINTABLE_MAX = 0x7E

TEXT_CHARSET = frozenset((string.ascii_letters + " ,.'!;:").encode("ascii"))

BYTE_CRITERION_PATTERN = re.compile(r"^byte\((\d{1,3})\)$")


class CriterionSpecError(ValueError):
    pass


@runtime_checkable
class Criterion(Protocol):
    """Anything that can score a byte sequence. Higher is better."""

    def __call__(self, data: BytesLike) -> float: ...


def _ratio(count: int, total: int) -> float:
    # An empty sequence scores 0 rather than dividing by zero.
    if total == 0:
        return 0.0
    return count / total


def score_printable(data: BytesLike) -> float:
    """Fraction of bytes in the printable ASCII range."""
    count = sum(1 for b in data if PRINTABLE_MIN <= b <= PRINTABLE_MAX)
    return _ratio(count, len(data))


def score_text_charset(data: BytesLike) -> float:
    """Fraction of bytes that are letters, space or common punctuation."""
    count = sum(1 for b in data if b in TEXT_CHARSET)
    return _ratio(count, len(data))


def score_byte_frequency(data: BytesLike, target: int) -> float:
    """Fraction of bytes equal to target."""
    count = sum(1 for b in data if b == target)
    return _ratio(count, len(data))


class PrintableRatio:
    name = "printable"

    def __call__(self, data: BytesLike) -> float:
        return score_printable(data)

    def __repr__(self) -> str:
        return "PrintableRatio()"


class TextCharsetRatio:
    name = "text"

    def __call__(self, data: BytesLike) -> float:
        return score_text_charset(data)

    def __repr__(self) -> str:
        return "TextCharsetRatio()"


class ByteFrequency:
    """Rewards buffers dominated by one recurring byte, like spaces or padding."""

    def __init__(self, target: int):
        if not 0 <= target <= 0xFF:
            raise CriterionSpecError(f"Target byte out of range: {target}")
        self.target = target

    @property
    def name(self) -> str:
        return f"byte({self.target})"

    def __call__(self, data: BytesLike) -> float:
        return score_byte_frequency(data, self.target)

    def __repr__(self) -> str:
        return f"ByteFrequency(target={self.target:#04x})"


class FunctionCriterion:
    """Adapts a plain callable to the Criterion protocol."""

    def __init__(self, fn: Callable[[BytesLike], float], name: str = ""):
        self.fn = fn
        self.name = name or getattr(fn, "__name__", "custom")

    def __call__(self, data: BytesLike) -> float:
        return float(self.fn(data))

    def __repr__(self) -> str:
        return f"FunctionCriterion({self.name})"


def as_criterion(fn: Callable[[BytesLike], float]) -> Criterion:
    """Return fn unchanged if it's already a criterion object, otherwise wrap it."""
    if isinstance(fn, (PrintableRatio, TextCharsetRatio, ByteFrequency, FunctionCriterion)):
        return fn
    if not callable(fn):
        raise TypeError(f"Criterion must be callable, got {type(fn).__name__}")
    return FunctionCriterion(fn)


def parse_criterion(spec: str) -> Criterion:
    """
    Build a criterion from its command line name.

    Accepts "printable", "text" or "byte(N)" where N is a decimal byte value.
    """
    spec = spec.strip()
    if spec == PrintableRatio.name:
        return PrintableRatio()
    if spec == TextCharsetRatio.name:
        return TextCharsetRatio()

    match = BYTE_CRITERION_PATTERN.match(spec)
    if match:
        target = int(match.group(1))
        if target > 0xFF:
            raise CriterionSpecError(f"Byte criterion value must be 0-255, got {target}")
        return ByteFrequency(target)

    raise CriterionSpecError(
        f"Unknown criterion: {spec!r} (expected 'printable', 'text' or 'byte(N)')"
    )
