"""Test configuration utilities and shared fixtures."""

import sys
from decimal import Decimal
from pathlib import Path

# Ensure the ``src`` directory is importable when tests are executed without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402

from payrolltax.config.schema import Employee, TaxBracket  # noqa: E402
from payrolltax.services.tax_engine import BracketTable  # noqa: E402

INF = Decimal("Infinity")


def make_bracket(
    floor: str, ceiling: str | Decimal, rate: str, code: str = "XX", name: str = "Testland"
) -> TaxBracket:
    """Build a bracket from string amounts for readable test tables."""

    return TaxBracket(
        code=code,
        name=name,
        floor=Decimal(floor),
        ceiling=ceiling if isinstance(ceiling, Decimal) else Decimal(ceiling),
        rate=Decimal(rate),
    )


def make_employee(
    employee_id: int,
    name: str | None = "Ada",
    state_code: str | None = "XX",
    hours: str = "10",
    rate: str = "10",
) -> Employee:
    return Employee(
        id=employee_id,
        name=name,
        state_code=state_code,
        hours_worked=Decimal(hours),
        rate=Decimal(rate),
    )


@pytest.fixture()
def two_brackets() -> tuple[TaxBracket, ...]:
    """A 5% bracket up to 10,000 followed by an open-ended 10% bracket."""

    return (
        make_bracket("0", "10000", "0.05"),
        make_bracket("10000", INF, "0.10"),
    )


@pytest.fixture()
def bracket_table(two_brackets: tuple[TaxBracket, ...]) -> BracketTable:
    """Two jurisdictions: the progressive ``XX`` table and a flat ``FL`` one."""

    flat = make_bracket("0", INF, "0.03", code="FL", name="Flatland")
    return BracketTable([*two_brackets, flat])


@pytest.fixture()
def data_files(tmp_path: Path) -> tuple[Path, Path]:
    """Write a small employee file and tax table, returning their paths."""

    employees = tmp_path / "employees.csv"
    employees.write_text(
        "id,name,stateCode,hoursWorked,rate\n"
        "1,Ada,XX,100,150\n"
        "2,Grace,FL,40,25\n"
        "3,Linus,ZZ,10,10\n"
        "x,Broken,XX,1,1\n",
        encoding="utf-8",
    )

    table = tmp_path / "taxtable.csv"
    table.write_text(
        "code,name,floor,ceiling,rate,\n"
        "XX,Testland,0,10000,0.05,\n"
        "XX,Testland,10000,inf,0.10,\n"
        "FL,Flatland,0,inf,0.03,\n",
        encoding="utf-8",
    )
    return employees, table
