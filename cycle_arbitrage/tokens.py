"""
Token identifier normalization.

Every token reference in configuration or on the wire ends up as one
four-part key ``symbol|class|subclass|network``. Three textual shapes are
accepted, tried in order:

1. pipe form, already canonical: ``GALA|Unit|none|none``
2. dollar form: ``GALA$Unit$none$none`` or ``$GMUSIC$Unit$none$none``
3. bare symbol: ``GALA`` or ``$GMUSIC``
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Union

from .constants import NONE_FIELD, UNIT_CLASS
from .exceptions import InvalidIdentifierError

_FIELD = r"[A-Za-z0-9:_-]+"
_PIPE_RE = re.compile(rf"^({_FIELD})\|({UNIT_CLASS})\|({_FIELD})\|({_FIELD})$")
_DOLLAR_RE = re.compile(
    rf"^\$?({_FIELD})\$({UNIT_CLASS})\$({_FIELD})\$({_FIELD})$"
)
_BARE_RE = re.compile(rf"^\$?({_FIELD})$")


@dataclass(frozen=True)
class TokenIdentifier:
    """Canonical four-part token key."""

    symbol: str
    token_class: str = UNIT_CLASS
    subclass: str = NONE_FIELD
    network: str = NONE_FIELD

    def __str__(self) -> str:
        return self.to_pipe()

    def to_pipe(self) -> str:
        return "|".join(self.parts())

    def to_dollar(self) -> str:
        return "$".join(self.parts())

    def parts(self) -> tuple:
        return (self.symbol, self.token_class, self.subclass, self.network)


def normalize(value: Union[str, TokenIdentifier]) -> TokenIdentifier:
    """
    Canonicalize a token reference.

    Args:
        value: Token text in pipe, dollar or bare-symbol form, or an
            already-built identifier

    Returns:
        TokenIdentifier for the token

    Raises:
        InvalidIdentifierError: If the text matches none of the shapes
    """
    if isinstance(value, TokenIdentifier):
        return value
    if not isinstance(value, str):
        raise InvalidIdentifierError(
            f"Invalid token id: {value!r} is not text", raw=repr(value)
        )

    text = value.strip()

    if "|" in text:
        match = _PIPE_RE.match(text)
    elif "$" in text[1:]:
        match = _DOLLAR_RE.match(text)
    else:
        bare = _BARE_RE.match(text)
        if bare:
            return TokenIdentifier(symbol=bare.group(1))
        match = None

    if not match:
        raise InvalidIdentifierError(
            f'Invalid token id: "{value}". Expected GALA|Unit|none|none, '
            f"GALA$Unit$none$none, $GMUSIC$Unit$none$none or GALA",
            raw=value,
        )

    symbol, token_class, subclass, network = match.groups()
    return TokenIdentifier(symbol, token_class, subclass, network)


def normalize_all(values: Iterable[Union[str, TokenIdentifier]]) -> List[TokenIdentifier]:
    """Normalize a list of references, dropping duplicates but keeping order."""
    return list(dict.fromkeys(normalize(v) for v in values))
