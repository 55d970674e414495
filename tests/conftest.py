from __future__ import annotations

import sys
from pathlib import Path

# Allow importing the package when running plain `pytest` without an editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))

import pytest

from pel import SourceFile, new_interpreter, parse_statements
from pel.stepper import Finished


@pytest.fixture
def parse():
    def _parse(source: str, *, name: str = "<test>", options=None):
        file = SourceFile(name, source)
        return file, parse_statements(file, options)

    return _parse


@pytest.fixture
def stepper_for(parse):
    def _stepper(source: str, **kwargs):
        _, statements = parse(source, **kwargs)
        return new_interpreter(statements)

    return _stepper


@pytest.fixture
def run_program(stepper_for):
    """Step a program to completion; returns (records, result)."""

    def _run(source: str, **kwargs):
        stepper = stepper_for(source, **kwargs)
        records = list(stepper.records())
        assert isinstance(stepper.state, Finished)
        return records, stepper.state.result

    return _run
