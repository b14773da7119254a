"""Enumerations for the fiscal tax core."""

from enum import StrEnum


class WarningLevel(StrEnum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SettingKey(StrEnum):
    PRO_LABORE = "pro_labore"
    CONTRIBUTION_CEILING = "contribution_ceiling"
    CONTRIBUTION_RATE = "contribution_rate"  # percent, e.g. 11 for 11%
    MANUAL_BRACKET = "manual_bracket"  # 0 = automatic, 1-6 = forced


class BracketStatus(StrEnum):
    CURRENT = "Faixa Atual"
    EXCEEDED = "Ultrapassada"
    UPCOMING = "Próxima"
