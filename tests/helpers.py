import copy
import json
from pathlib import Path

from coolbeans.schema import Profile

SAMPLE_PROFILE = Path(__file__).resolve().parent.parent / "sample_profile.json"


def write_profile(tmp_path: Path, data: dict, filename: str = "profile.json") -> Path:
    path = tmp_path / filename
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def clone_profile(data: dict) -> dict:
    return copy.deepcopy(data)


def make_profile(
    *,
    accounts: list[dict] | None = None,
    incomes: list[dict] | None = None,
    expenses: list[dict] | None = None,
    taxes: list[dict] | None = None,
    rmds: list[dict] | None = None,
    inflation_pct: float = 0.0,
    current_age: int = 60,
    terminal_age: int = 61,
) -> Profile:
    """Build a profile with no default tax or RMD tables unless given."""
    return Profile.from_dict(
        {
            "general": {
                "inflation_pct": inflation_pct,
                "current_age": current_age,
                "terminal_age": terminal_age,
            },
            "accounts": accounts or [],
            "incomes": incomes or [],
            "expenses": expenses or [],
            "taxes": taxes or [],
            "rmds": rmds or [],
        }
    )
