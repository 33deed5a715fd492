import os


def _as_bool(value) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    DATABASE_URL = os.getenv("MIZAN_DATABASE_URL", "sqlite:///./mizan.db")
    APP_NAME = os.getenv("MIZAN_APP_NAME", "ميزان للمحاسبة")
    CURRENCY = os.getenv("MIZAN_CURRENCY", "YER")  # YER / SAR / USD
    LOG_LEVEL = os.getenv("MIZAN_LOG_LEVEL", "INFO")
    SEED_SAMPLE_DATA = _as_bool(os.getenv("MIZAN_SEED_SAMPLE_DATA", "0"))


settings = Settings()
