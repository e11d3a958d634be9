"""
Investment catalog loader: JSON file → immutable tuple of ``InvestmentOption``.

The catalog is a JSON array of objects using the camelCase wire names::

    [
      {
        "id": "sp500-index",
        "name": "S&P 500 Index Fund",
        "riskLevel": "medium",
        "timeHorizon": ["medium", "long"],
        "liquidity": "high",
        "minAmount": 1000,
        "suitableFor": ["beginner", "intermediate"],
        ...
      }
    ]

Validation rules
----------------
- The top-level value must be an array.
- Every entry must validate as an ``InvestmentOption``.
- Duplicate ``id`` values are rejected.

All violations raise ``ValueError`` naming the offending index, so a bad
catalog fails at startup rather than during a user request.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from money_harbor.models.investment import InvestmentOption

log = logging.getLogger(__name__)


def parse_catalog(records: list[dict[str, Any]]) -> tuple[InvestmentOption, ...]:
    """Validate raw catalog records.

    Args:
        records: Parsed JSON array.

    Returns:
        Tuple of validated options in file order.

    Raises:
        ValueError: On an invalid entry or a duplicate id.
    """
    if not isinstance(records, list):
        raise ValueError("Catalog must be a JSON array of investment objects.")

    options: list[InvestmentOption] = []
    seen_ids: set[str] = set()

    for i, rec in enumerate(records):
        try:
            option = InvestmentOption.model_validate(rec)
        except ValidationError as exc:
            first = exc.errors()[0]
            loc = ".".join(str(p) for p in first["loc"])
            raise ValueError(
                f"Catalog entry at index {i} is invalid ({loc}): {first['msg']}"
            ) from exc

        if option.id in seen_ids:
            raise ValueError(f"Duplicate catalog id '{option.id}' at index {i}.")
        seen_ids.add(option.id)
        options.append(option)

    return tuple(options)


def find_option(
    options: Sequence[InvestmentOption],
    option_id: str,
) -> Optional[InvestmentOption]:
    """Return the option with ``option_id``, or ``None``."""
    return next((o for o in options if o.id == option_id), None)


def load_catalog(path: Path) -> tuple[InvestmentOption, ...]:
    """Load and validate the catalog JSON file at ``path``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError:        If the file is not valid JSON or fails validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Catalog file {path} is not valid JSON: {exc}") from exc

    options = parse_catalog(raw)
    log.info("Loaded %d investment options from %s", len(options), path)
    return options
