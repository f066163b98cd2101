from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "MORTGAGE_"}

    # App
    debug: bool = False
    log_level: str = "INFO"
    api_title: str = "Mortgage Calculator"
    cors_origins: list[str] = ["*"]

    # Engine bounds
    max_term_months: int = 600  # 50 years; caps every schedule loop
    balance_epsilon: Decimal = Decimal("0.005")  # half a cent
    max_amount: Decimal = Decimal("1000000000000")  # inputs above are capped
    max_rate_percent: Decimal = Decimal("100")

    # Interest-first refinance billing
    days_per_year: int = 365
    interest_first_billing_days: int = 30


settings = Settings()
