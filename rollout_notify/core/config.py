"""Runtime settings for webhook notifications.

Only defaults live here. Webhook URLs and per-hook timeouts are always passed
in by the caller.
"""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    LOG_LEVEL: str = "INFO"

    # Duration strings, same syntax as WebhookTarget.timeout
    PHASE_TIMEOUT: str = "10s"
    EVENT_TIMEOUT: str = "5s"
    # Applied by the dispatcher when it is handed an empty timeout
    DISPATCH_TIMEOUT: str = "10s"

    USER_AGENT: str = "rollout-notify/0.1"

    model_config = {
        "env_prefix": "ROLLOUT_NOTIFY_",
        "case_sensitive": False,
    }


_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = Settings()
    return _settings_cache


def reset_settings() -> None:
    global _settings_cache
    _settings_cache = None
