"""Engine configuration via environment variables."""

from pydantic_settings import BaseSettings

from tradelog.utils.constants import (
    DEFAULT_ASSET_CLASS,
    DEFAULT_SIZE,
    IMPORT_BATCH_SIZE,
    TWO_DIGIT_YEAR_PIVOT,
    AssetClass,
)


class Settings(BaseSettings):
    log_level: str = "INFO"

    # Decoder defaults for cells a broker export leaves out
    default_size: float = DEFAULT_SIZE
    default_asset_class: AssetClass = DEFAULT_ASSET_CLASS
    two_digit_year_pivot: int = TWO_DIGIT_YEAR_PIVOT

    # Caller-side helpers
    session_timezone: str = "America/New_York"
    import_batch_size: int = IMPORT_BATCH_SIZE

    model_config = {"env_prefix": "TRADELOG_", "env_file": ".env", "frozen": True}


settings = Settings()
