# quantity_parser.py
#
# Description:
# This module turns formatted amount strings such as "2 1/2 cups" or
# "Bake at 200°C for 30 min" into a stream of typed tokens. Numbers are
# reported with their span and a short lookahead window, so consumers can
# tell ingredient quantities apart from oven temperatures and durations.

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Union

logger = logging.getLogger(__name__)

LOOKAHEAD_LENGTH = 12

# Mixed numbers must be tried before simple fractions, and both before plain numbers.
NUMBER_PATTERN = re.compile(
    r"(?P<mixed>\d+\s+\d+/\d+)|(?P<fraction>\d+/\d+)|(?P<decimal>\d+(?:[.,]\d+)?)",
    re.ASCII,
)

# Temperature and time markers, English and Swedish.
NON_SCALABLE_PATTERN = re.compile(r"[°º]|\b(?:deg|min|hour|hr|stund|sek|minut)", re.ASCII)


class TokenKind(Enum):
    DECIMAL = "decimal"
    FRACTION = "fraction"
    MIXED = "mixed"


@dataclass(frozen=True)
class QuantityToken:
    """A number found inside a formatted string."""
    kind: TokenKind
    text: str
    start: int
    length: int
    lookahead: str
    value: float

    @property
    def end(self) -> int:
        return self.start + self.length

    @property
    def excluded(self) -> bool:
        """True when the token is followed by a temperature or time marker."""
        return is_non_scalable_context(self.lookahead)

    @property
    def scalable(self) -> bool:
        return not self.excluded and math.isfinite(self.value)


@dataclass(frozen=True)
class LiteralText:
    """A run of text between quantity tokens."""
    text: str


Segment = Union[QuantityToken, LiteralText]


def is_non_scalable_context(lookahead: str) -> bool:
    return NON_SCALABLE_PATTERN.search(lookahead.lower()) is not None


def _ratio(numerator: str, denominator: str) -> float:
    den = int(denominator)
    if den == 0:
        logger.debug(f"Fraction {numerator}/{denominator} has a zero denominator, leaving it unscaled.")
        return math.nan
    return int(numerator) / den


def parse_token_value(kind: TokenKind, text: str) -> float:
    """
    Computes the numeric value of a token's text.

    Commas are accepted as decimal separators. A zero denominator gives NaN
    instead of raising, so a malformed fraction never breaks rendering.
    """
    if kind is TokenKind.MIXED:
        whole, fraction = text.split(None, 1)
        numerator, denominator = fraction.split("/")
        return int(whole) + _ratio(numerator, denominator)
    if kind is TokenKind.FRACTION:
        numerator, denominator = text.split("/")
        return _ratio(numerator, denominator)
    return float(text.replace(",", "."))


def tokenize(text: str) -> Iterator[QuantityToken]:
    """
    Lazily yields every quantity token in the text, left to right.

    Each token carries its kind, source span, the 12 characters following it
    and its parsed value. Whether it may be scaled is decided by the
    lookahead: a degree sign or a time word right after the number marks it
    as non-scalable.
    """
    if not text:
        return
    for match in NUMBER_PATTERN.finditer(text):
        kind = TokenKind(match.lastgroup)
        token_text = match.group(0)
        end = match.end()
        yield QuantityToken(
            kind=kind,
            text=token_text,
            start=match.start(),
            length=len(token_text),
            lookahead=text[end:end + LOOKAHEAD_LENGTH],
            value=parse_token_value(kind, token_text),
        )


def segments(text: str) -> List[Segment]:
    """Splits the text into alternating literal runs and quantity tokens."""
    result: List[Segment] = []
    position = 0
    for token in tokenize(text):
        if token.start > position:
            result.append(LiteralText(text[position:token.start]))
        result.append(token)
        position = token.end
    if position < len(text or ""):
        result.append(LiteralText(text[position:]))
    return result


def parse_quantity(text: str) -> float | None:
    """Returns the value of the first scalable token in the text, if any."""
    for token in tokenize(text):
        if token.scalable:
            return token.value
    return None
