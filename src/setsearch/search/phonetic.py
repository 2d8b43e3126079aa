"""Phonetic keying of normalized tokens.

Spelling variants that sound alike collapse onto the same code, and so onto
the same posting set. The collapse is deliberate: it is the engine's only
form of fuzzy matching.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

import jellyfish


class PhoneticKeyer:
    """Maps tokens to phonetic codes.

    Args:
        encoder: ``encode(word) -> code`` callable. Defaults to Metaphone.

    Tokens the encoder cannot express (digits, symbols) would otherwise get an
    empty code and share one catch-all posting set, so the upper-cased token
    is used as its own code instead.
    """

    def __init__(self, encoder: Callable[[str], str] | None = None) -> None:
        self.encoder = encoder or jellyfish.metaphone

    def code_of(self, token: str) -> str:
        code = self.encoder(token)
        if not code:
            return token.upper()
        return code

    def codes_of(self, tokens: Iterable[str]) -> list[str]:
        """Return the distinct codes covered by ``tokens`` in first-seen order."""
        seen: dict[str, None] = {}
        for token in tokens:
            seen.setdefault(self.code_of(token), None)
        return list(seen)

    def code_map(self, tokens: Iterable[str]) -> dict[str, str]:
        """Return ``{token: code}`` for every distinct token."""
        return {token: self.code_of(token) for token in tokens}
