"""Human-facing ticket codes of the form ``TK-<year>-<suffix>``."""

from __future__ import annotations

import secrets
from typing import Literal

CODE_PREFIX = "TK"

CodeStrategy = Literal["random", "sequence"]


def year_prefix(year: int) -> str:
    return f"{CODE_PREFIX}-{year}-"


def random_code(year: int) -> str:
    """Six upper-case hex characters: collision-resistant, not ordered."""

    return f"{year_prefix(year)}{secrets.token_hex(3).upper()}"


def sequence_code(year: int, existing_count: int) -> str:
    """Zero-padded position after the codes already issued for ``year``.

    Two creates that count concurrently get the same code.
    """

    return f"{year_prefix(year)}{existing_count + 1:04d}"


class TicketCodeGenerator:
    """Generate ticket codes using one of the two supported strategies."""

    def __init__(self, strategy: CodeStrategy = "random") -> None:
        if strategy not in ("random", "sequence"):
            raise ValueError(f"Unsupported ticket code strategy: {strategy}")
        self.strategy = strategy

    def generate(self, year: int, existing_count: int) -> str:
        if self.strategy == "sequence":
            return sequence_code(year, existing_count)
        return random_code(year)
