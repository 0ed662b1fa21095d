from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from eos_upror import constants


class Settings(BaseSettings):
    """Calculator configuration settings."""

    # Model resource
    model_path: str = constants.DEFAULT_MODEL_PATH
    providers: list[str] = ["CPUExecutionProvider"]
    output_name: str = constants.PROBABILITIES_OUTPUT
    positive_class_index: int = constants.POSITIVE_CLASS_INDEX
    verify_input_signature: bool = True

    # Encoding
    strict_encoding: bool = False

    model_config = SettingsConfigDict(
        env_prefix="UPROR_",
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
