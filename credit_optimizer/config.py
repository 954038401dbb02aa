"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from credit_optimizer.domain.policy import OptimizerPolicy


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "credit-optimizer"
    log_level: str = "INFO"

    # Payment policy
    target_utilization: float = 0.05
    optimization_days_before: int = 2
    urgent_paydown_ratio: float = 0.90
    minimum_payment_ratio: float = 0.02
    minimum_payment_floor: float = 25.0

    # Rate assumptions (percent)
    default_apr: float = 18.0
    assumed_apr: float = 20.0
    transfer_fee_percent: float = 3.0

    # Hypothetical new card
    new_card_statement_day: int = 15
    new_card_due_day: int = 10
    hard_inquiry_penalty_min: int = 5
    hard_inquiry_penalty_max: int = 10

    max_positive_impact: int = 150

    def policy(self) -> OptimizerPolicy:
        """Policy object handed to the domain calculators"""
        return OptimizerPolicy(
            target_utilization=self.target_utilization,
            optimization_days_before=self.optimization_days_before,
            urgent_paydown_ratio=self.urgent_paydown_ratio,
            minimum_payment_ratio=self.minimum_payment_ratio,
            minimum_payment_floor=self.minimum_payment_floor,
            default_apr=self.default_apr,
            assumed_apr=self.assumed_apr,
            transfer_fee_percent=self.transfer_fee_percent,
            new_card_statement_day=self.new_card_statement_day,
            new_card_due_day=self.new_card_due_day,
            hard_inquiry_penalty=(self.hard_inquiry_penalty_min, self.hard_inquiry_penalty_max),
            max_positive_impact=self.max_positive_impact,
        )


settings = Settings()
