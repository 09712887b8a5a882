# runtime configuration for the guardian companion.

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    store_path: str = "guardian_store.json" # JSON file holding profile, arm flag, last alert.
    notify_timeout: float = 10.0 # seconds per contact before it is marked failed.
    random_seed: int | None = None # seeds the simulated hazard source when set.
    log_level: str = "INFO"
    whisper_model: str = "base.en"

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> "Settings":
        """
        Build settings from the environment, after loading the .env file.

        Recognised variables: GUARDIAN_STORE_PATH, GUARDIAN_NOTIFY_TIMEOUT,
        GUARDIAN_RANDOM_SEED, GUARDIAN_LOG_LEVEL, GUARDIAN_WHISPER_MODEL.

        Raises
        ------
        EnvironmentError
            If any variable is set to a value that cannot be used.
        """
        load_dotenv(dotenv_path=dotenv_path)

        defaults = cls()
        invalid: list[str] = []

        timeout_raw = os.environ.get("GUARDIAN_NOTIFY_TIMEOUT", "")
        notify_timeout = defaults.notify_timeout
        if timeout_raw:
            try:
                notify_timeout = float(timeout_raw)
                if notify_timeout <= 0:
                    raise ValueError(timeout_raw)
            except ValueError:
                invalid.append("GUARDIAN_NOTIFY_TIMEOUT")

        seed_raw = os.environ.get("GUARDIAN_RANDOM_SEED", "")
        random_seed = None
        if seed_raw:
            try:
                random_seed = int(seed_raw)
            except ValueError:
                invalid.append("GUARDIAN_RANDOM_SEED")

        log_level = os.environ.get("GUARDIAN_LOG_LEVEL", defaults.log_level).upper()
        if log_level not in _LOG_LEVELS:
            invalid.append("GUARDIAN_LOG_LEVEL")

        if invalid:
            raise EnvironmentError(
                f"Invalid .env variable(s): {', '.join(invalid)}"
            )

        settings = cls(
            store_path=os.environ.get("GUARDIAN_STORE_PATH", defaults.store_path),
            notify_timeout=notify_timeout,
            random_seed=random_seed,
            log_level=log_level,
            whisper_model=os.environ.get("GUARDIAN_WHISPER_MODEL", defaults.whisper_model),
        )
        logger.debug("Settings loaded | store=%s | timeout=%.1fs", settings.store_path, settings.notify_timeout)
        return settings
