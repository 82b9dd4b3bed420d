from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ZKV_")

    # Fallback verification key when no key option is given
    verification_key_path: Path | None = None
    # Identity registry used by the HTTP root verifier
    registry_url: str | None = None
    registry_root_path: str = "/v1/roots/{root}"
    registry_timeout_seconds: float = 5.0
    # External pairing check
    snarkjs_bin: str = "snarkjs"
    snarkjs_timeout_seconds: float = 30.0
    log_level: str = "INFO"

settings = Settings()
