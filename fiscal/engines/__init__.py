"""Tax computation engines."""

from fiscal.engines.bracket_warning import BracketWarningEngine
from fiscal.engines.brackets import ANEXO_III, DEFAULT_THRESHOLDS, BracketTable, WarningThresholds
from fiscal.engines.calculator import TaxCalculator, calculate_contribution, ytd_contribution
from fiscal.engines.projection import TaxProjectionEngine

__all__ = [
    "ANEXO_III",
    "BracketTable",
    "BracketWarningEngine",
    "DEFAULT_THRESHOLDS",
    "TaxCalculator",
    "TaxProjectionEngine",
    "WarningThresholds",
    "calculate_contribution",
    "ytd_contribution",
]
