"""Default tax bracket tables and RMD divisors used when a profile omits them."""

from __future__ import annotations

from typing import Any, Final

# Federal brackets are 2023 married-filing-jointly; California mirrors the
# state schedule. Each rate applies to the whole amount of its bracket.
DEFAULT_TAX_TABLES: Final[list[dict[str, Any]]] = [
    {
        "id": 1,
        "name": "US income",
        "kind": "income",
        "rates": [
            {"id": 1, "rate_pct": 10, "min": 0, "max": 22000},
            {"id": 2, "rate_pct": 12, "min": 22000, "max": 89450},
            {"id": 3, "rate_pct": 22, "min": 89450, "max": 190750},
            {"id": 4, "rate_pct": 24, "min": 190750, "max": 364200},
            {"id": 5, "rate_pct": 32, "min": 364200, "max": 462500},
            {"id": 6, "rate_pct": 35, "min": 462500, "max": 693750},
            {"id": 7, "rate_pct": 37, "min": 693750},
        ],
    },
    {
        "id": 2,
        "name": "US capital gains",
        "kind": "gains",
        "rates": [
            {"id": 8, "rate_pct": 0, "min": 0, "max": 89250},
            {"id": 9, "rate_pct": 15, "min": 89250, "max": 553850},
            {"id": 10, "rate_pct": 20, "min": 553850},
        ],
    },
    {
        "id": 3,
        "name": "CA income",
        "kind": "income",
        "rates": [
            {"id": 11, "rate_pct": 1, "min": 0, "max": 20197},
            {"id": 12, "rate_pct": 2, "min": 20197, "max": 47883},
            {"id": 13, "rate_pct": 4, "min": 47883, "max": 75575},
            {"id": 14, "rate_pct": 6, "min": 75575, "max": 104909},
            {"id": 15, "rate_pct": 8, "min": 104909, "max": 132589},
            {"id": 16, "rate_pct": 9.3, "min": 132589, "max": 677277},
            {"id": 17, "rate_pct": 10.3, "min": 677277, "max": 812727},
            {"id": 18, "rate_pct": 11.3, "min": 812727, "max": 1354550},
            {"id": 19, "rate_pct": 12.3, "min": 1354550},
        ],
    },
]

# IRS Uniform Lifetime Table (Table III).
DEFAULT_RMD_DIVISORS: Final[dict[int, float]] = {
    72: 27.4,
    73: 26.5,
    74: 25.5,
    75: 24.6,
    76: 23.7,
    77: 22.9,
    78: 22.0,
    79: 21.1,
    80: 20.2,
    81: 19.4,
    82: 18.5,
    83: 17.7,
    84: 16.8,
    85: 16.0,
    86: 15.2,
    87: 14.4,
    88: 13.7,
    89: 12.9,
    90: 12.2,
    91: 11.5,
    92: 10.8,
    93: 10.1,
    94: 9.5,
    95: 8.9,
    96: 8.4,
    97: 7.8,
    98: 7.3,
    99: 6.8,
    100: 6.4,
    101: 6.0,
    102: 5.6,
    103: 5.2,
    104: 4.9,
    105: 4.6,
    106: 4.3,
    107: 4.1,
    108: 3.9,
    109: 3.7,
    110: 3.5,
    111: 3.4,
    112: 3.3,
    113: 3.1,
    114: 3.0,
    115: 2.9,
    116: 2.8,
    117: 2.7,
    118: 2.5,
    119: 2.3,
    120: 2.0,
}
