import re

import pytest

from app.tickets.codes import TicketCodeGenerator, random_code, sequence_code


def test_random_code_format():
    assert re.fullmatch(r"TK-2026-[0-9A-F]{6}", random_code(2026))


def test_random_codes_do_not_repeat_in_practice():
    codes = {random_code(2026) for _ in range(200)}
    assert len(codes) > 190


def test_sequence_code_pads_the_next_position():
    assert sequence_code(2026, 0) == "TK-2026-0001"
    assert sequence_code(2026, 41) == "TK-2026-0042"
    assert sequence_code(2027, 9999) == "TK-2027-10000"


def test_sequence_strategy_repeats_for_the_same_count():
    generator = TicketCodeGenerator("sequence")
    assert generator.generate(2026, 3) == generator.generate(2026, 3) == "TK-2026-0004"


def test_random_strategy_ignores_count():
    generator = TicketCodeGenerator()
    assert generator.strategy == "random"
    assert generator.generate(2026, 5).startswith("TK-2026-")


def test_unknown_strategy_is_refused():
    with pytest.raises(ValueError):
        TicketCodeGenerator("uuid")  # type: ignore[arg-type]
