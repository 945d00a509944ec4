"""
Tax regime configuration for the harvesting engine.

The exemption limit and the long-term rate change from budget to budget,
so they live in data rather than in the calculation code.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from .models import FiscalYear


@dataclass(frozen=True)
class ExemptionSchedule:
    """
    Annual LTCG exemption under Section 112A.

    The limit was raised from ₹1,00,000 to ₹1,25,000 by Finance (No. 2)
    Act 2024. Fiscal years starting in or after `cutoff_year` use
    `limit_from`; earlier years use `limit_before`.
    """
    cutoff_year: int = 2024
    limit_before: float = 100000.0
    limit_from: float = 125000.0

    def limit_for(self, fiscal_year: FiscalYear) -> float:
        """Get the exemption limit for a fiscal year."""
        if fiscal_year.start_year >= self.cutoff_year:
            return self.limit_from
        return self.limit_before


@dataclass(frozen=True)
class TaxRegime:
    """
    Tax rules the harvester works with.

    Attributes:
        exemption: Exemption limit schedule
        ltcg_tax_rate: Base LTCG rate used to value exempted gains (12.5%)
        lock_in_keywords: Name/category fragments marking lock-in schemes (ELSS)
    """
    exemption: ExemptionSchedule = field(default_factory=ExemptionSchedule)
    ltcg_tax_rate: float = 0.125
    lock_in_keywords: Tuple[str, ...] = ("elss", "tax saver")

    KEYS = (
        'exemption_cutoff_year',
        'exemption_limit_before',
        'exemption_limit_from',
        'ltcg_tax_rate',
        'lock_in_keywords',
    )

    def exemption_limit(self, fiscal_year: FiscalYear) -> float:
        return self.exemption.limit_for(fiscal_year)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaxRegime":
        """
        Build a regime from a flat dictionary, falling back to defaults
        for missing keys.

        Raises:
            ValueError: On unknown keys or invalid values
        """
        unknown = set(data) - set(cls.KEYS)
        if unknown:
            raise ValueError(f"Unknown regime keys: {', '.join(sorted(unknown))}")

        defaults = cls()
        try:
            exemption = ExemptionSchedule(
                cutoff_year=int(data.get('exemption_cutoff_year', defaults.exemption.cutoff_year)),
                limit_before=float(data.get('exemption_limit_before', defaults.exemption.limit_before)),
                limit_from=float(data.get('exemption_limit_from', defaults.exemption.limit_from)),
            )
            rate = float(data.get('ltcg_tax_rate', defaults.ltcg_tax_rate))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid regime value: {e}")

        if exemption.limit_before < 0 or exemption.limit_from < 0:
            raise ValueError("Exemption limits must not be negative")
        if not 0 <= rate < 1:
            raise ValueError(f"ltcg_tax_rate must be a fraction, got {rate}")

        keywords = data.get('lock_in_keywords', defaults.lock_in_keywords)
        if not isinstance(keywords, (list, tuple)) or not all(isinstance(k, str) for k in keywords):
            raise ValueError("lock_in_keywords must be a list of strings")

        return cls(
            exemption=exemption,
            ltcg_tax_rate=rate,
            lock_in_keywords=tuple(k.lower() for k in keywords),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'exemption_cutoff_year': self.exemption.cutoff_year,
            'exemption_limit_before': self.exemption.limit_before,
            'exemption_limit_from': self.exemption.limit_from,
            'ltcg_tax_rate': self.ltcg_tax_rate,
            'lock_in_keywords': list(self.lock_in_keywords),
        }


def load_regime(filepath: str) -> TaxRegime:
    """
    Load a tax regime from a JSON file.

    Args:
        filepath: Path to a JSON object with any of TaxRegime.KEYS

    Raises:
        ValueError: If the file is not valid JSON or holds invalid values
        OSError: If the file cannot be read
    """
    with open(filepath, 'r') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid regime file {filepath}: {e}")
    if not isinstance(data, dict):
        raise ValueError(f"Invalid regime file {filepath}: expected a JSON object")
    return TaxRegime.from_dict(data)


DEFAULT_REGIME = TaxRegime()
