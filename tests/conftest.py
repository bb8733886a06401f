import os
from pathlib import Path

import pytest
from hypothesis import HealthCheck, settings

# Generated programs are cheap to parse but slow to shrink on CI machines.
settings.register_profile(
    "ci", max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow]
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))

SAMPLE_PROGRAM = """\
# running total of the numbers read
var total
var n
let total = 0
until n == 0
    read n
    let total = total + n * 1
repeat
if total > 100 then
    write total / 2
else
    report(total, n)
endif
"""


@pytest.fixture  # type: ignore[misc]
def sample_program() -> str:
    return SAMPLE_PROGRAM


@pytest.fixture  # type: ignore[misc]
def program_file(tmp_path: Path) -> Path:
    path = tmp_path / "program.txt"
    path.write_text(SAMPLE_PROGRAM, encoding="utf-8")
    return path
