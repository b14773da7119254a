"""Data models for the fiscal tax core."""

from fiscal.models.enums import BracketStatus, SettingKey, WarningLevel
from fiscal.models.reports import (
    AuditEntry,
    BracketRow,
    BracketWarning,
    Income,
    MonthlyTaxBreakdown,
    MonthlyTotals,
    TaxProjection,
    TaxReport,
)
from fiscal.models.settings import FiscalSettings
from fiscal.models.tax import BracketInfo, ContributionConfig, TaxBracket, TaxCalculation

__all__ = [
    "AuditEntry",
    "BracketRow",
    "BracketInfo",
    "BracketStatus",
    "BracketWarning",
    "ContributionConfig",
    "FiscalSettings",
    "Income",
    "MonthlyTaxBreakdown",
    "MonthlyTotals",
    "SettingKey",
    "TaxBracket",
    "TaxCalculation",
    "TaxProjection",
    "TaxReport",
    "WarningLevel",
]
