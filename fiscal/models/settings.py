"""User-level fiscal settings persisted in the database."""

from decimal import Decimal

from pydantic import BaseModel, Field

from fiscal.models.tax import ContributionConfig

DEFAULT_CONTRIBUTION_CEILING = Decimal("7786.02")
DEFAULT_CONTRIBUTION_RATE = Decimal("11")


class FiscalSettings(BaseModel):
    pro_labore: Decimal = Decimal("0")
    contribution_ceiling: Decimal = DEFAULT_CONTRIBUTION_CEILING
    contribution_rate: Decimal = DEFAULT_CONTRIBUTION_RATE  # percent
    manual_bracket: int = Field(default=0, ge=0)

    def contribution_config(self) -> ContributionConfig | None:
        """Build the contribution config, or None when no pro-labore is set."""
        if self.pro_labore <= 0:
            return None
        return ContributionConfig(
            base_amount=self.pro_labore,
            ceiling=self.contribution_ceiling,
            rate=self.contribution_rate / 100,
        )
