from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )
    # App
    environment: str = "development"
    log_level: str = "INFO"
    # Comma-separated extra CORS origins (preview/staging frontends)
    extra_allowed_origins: str = ""
    # Network
    request_timeout_seconds: int = 15
    audit_timeout_seconds: int = 60
    # Refuse to fetch loopback / private network targets
    block_private_networks: bool = True
    # Measurement provider: "simulated" (randomised) or "fixed" (deterministic)
    signal_source: str = "simulated"
    # Rate limiting
    rate_limit_per_minute: int = 10
    # Only behind a proxy that sets X-Forwarded-For itself
    trust_forwarded_for: bool = False
    # Scanner user agents
    security_user_agent: str = "WebInspect Security Scanner 1.0"
    performance_user_agent: str = "WebInspect Performance Scanner 1.0"
    mobile_user_agent: str = (
        "Mozilla/5.0 (iPhone; CPU iPhone OS 14_7_1 like Mac OS X) AppleWebKit/605.1.15"
    )
    seo_user_agent: str = "WebInspect SEO Scanner 1.0"
    accessibility_user_agent: str = "WebInspect-AccessibilityBot/1.0"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
