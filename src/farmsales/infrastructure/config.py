"""Runtime settings, read from the environment (and a ``.env`` file)."""

import logging
import os
from datetime import time
from decimal import Decimal, InvalidOperation
from pathlib import Path

from dotenv import load_dotenv

from farmsales.domain.exceptions import ValidationError
from farmsales.domain.model.security import WorkingHours

load_dotenv()

LOG_LEVELS = tuple(
    logging.getLevelName(level)
    for level in (logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL)
)


class Settings:
    """Values are read when the object is built, so tests can patch the env."""

    def __init__(self) -> None:
        # Storage
        self.DATA_DIR: str = os.getenv("FARMSALES_DATA_DIR", "data")
        self.LOCK_TIMEOUT: str = os.getenv("FARMSALES_LOCK_TIMEOUT", "10")

        # Money
        self.VAT_RATE: str = os.getenv("FARMSALES_VAT_RATE", "0.18")
        self.CURRENCY: str = os.getenv("FARMSALES_CURRENCY", "LKR")

        # Farm clock (Asia/Colombo is UTC+05:30)
        self.UTC_OFFSET_MINUTES: str = os.getenv("FARMSALES_UTC_OFFSET_MINUTES", "330")
        self.WORKDAY_START: str = os.getenv("FARMSALES_WORKDAY_START", "06:00")
        self.WORKDAY_END: str = os.getenv("FARMSALES_WORKDAY_END", "18:00")

        # Logging
        self.LOG_LEVEL: str = os.getenv("FARMSALES_LOG_LEVEL", "INFO")

    @property
    def data_dir(self) -> Path:
        return Path(self.DATA_DIR)

    @property
    def store_path(self) -> Path:
        return self.data_dir / "farmsales.json"

    @property
    def lock_timeout(self) -> float:
        """Seconds a command waits for another process to release the store."""
        try:
            timeout = float(self.LOCK_TIMEOUT)
        except ValueError as exc:
            raise ValidationError(
                f"FARMSALES_LOCK_TIMEOUT is not a number: {self.LOCK_TIMEOUT!r}"
            ) from exc
        if not timeout > 0:
            raise ValidationError(f"FARMSALES_LOCK_TIMEOUT must be > 0, got {self.LOCK_TIMEOUT!r}")
        return timeout

    @property
    def vat_rate(self) -> Decimal:
        try:
            rate = Decimal(self.VAT_RATE)
        except InvalidOperation as exc:
            raise ValidationError(f"FARMSALES_VAT_RATE is not a number: {self.VAT_RATE!r}") from exc
        if not rate.is_finite() or rate < 0:
            raise ValidationError(f"FARMSALES_VAT_RATE must be >= 0, got {self.VAT_RATE!r}")
        return rate

    @property
    def utc_offset_minutes(self) -> int:
        try:
            return int(self.UTC_OFFSET_MINUTES)
        except ValueError as exc:
            raise ValidationError(
                f"FARMSALES_UTC_OFFSET_MINUTES must be an integer, got {self.UTC_OFFSET_MINUTES!r}"
            ) from exc

    @property
    def working_hours(self) -> WorkingHours:
        return WorkingHours(
            start=_parse_time("FARMSALES_WORKDAY_START", self.WORKDAY_START),
            end=_parse_time("FARMSALES_WORKDAY_END", self.WORKDAY_END),
        )

    @property
    def log_level(self) -> str:
        level = self.LOG_LEVEL.strip().upper()
        if level not in LOG_LEVELS:
            raise ValidationError(
                f"FARMSALES_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, "
                f"got {self.LOG_LEVEL!r}"
            )
        return level


def _parse_time(name: str, raw: str) -> time:
    try:
        return time.fromisoformat(raw.strip())
    except ValueError as exc:
        raise ValidationError(f"{name} must look like HH:MM, got {raw!r}") from exc
