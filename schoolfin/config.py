import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Settings:
    calendar_path: Optional[str] = None     # JSON calendar table overriding nepali-datetime
    categories_path: Optional[str] = None   # JSON category catalog overriding the bundled one
    ledger_path: str = "data/ledger.json"
    locale: str = "en"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        locale = env.get("SCHOOLFIN_LOCALE", "en").lower()
        if locale not in ("en", "ne"):
            raise ValueError(f"SCHOOLFIN_LOCALE must be 'en' or 'ne', got {locale!r}")
        return cls(
            calendar_path=env.get("SCHOOLFIN_CALENDAR_PATH") or None,
            categories_path=env.get("SCHOOLFIN_CATEGORIES_PATH") or None,
            ledger_path=env.get("SCHOOLFIN_LEDGER_PATH", "data/ledger.json"),
            locale=locale,
            log_level=env.get("SCHOOLFIN_LOG_LEVEL", "INFO").upper(),
        )
