from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment settings (ACC_* variables or a .env file)."""

    model_dir: Path = Path("models")
    own_model_file: str = "own_model.joblib"
    griffon_model_file: str = "griffon_model.joblib"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="ACC_", env_file=".env", protected_namespaces=())
