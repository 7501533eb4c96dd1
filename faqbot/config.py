from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import Field, ValidationError, field_validator, model_validator
from functools import lru_cache
import json
from typing import Annotated, List

from faqbot.errors import ConfigurationError
from faqbot.models.workflow import ActionMode


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "FAQ Bot"
    debug: bool = False

    # Matching & response workflow
    match_threshold: float = Field(0.85, ge=0.0, le=1.0)
    action_mode: ActionMode = ActionMode.DIRECT_ANSWER
    # Accepts a JSON list or a comma separated string: NOTIFY_TARGETS=C01,U02
    notify_targets: Annotated[List[str], NoDecode] = []

    # Knowledge base
    knowledge_base_source: str = "file"  # file | github
    knowledge_base_path: str = "knowledge_base.yaml"
    github_kb_path: str = "faq/knowledge_base.yaml"

    # Slack
    slack_bot_token: str = ""

    # GitHub
    github_token: str = ""
    github_repo_owner: str = ""
    github_repo_name: str = ""
    github_default_branch: str = "main"

    # OpenAI (answer generation via gen_ai_hub proxy)
    # No API key needed - uses gen_ai_hub proxy
    llm_enabled: bool = False
    openai_model: str = "gpt-4o"
    temperature: float = 0.2
    llm_fallback_on_error: bool = True  # Use the rule-based answer when the LLM fails

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("notify_targets", mode="before")
    @classmethod
    def _split_targets(cls, value):
        if isinstance(value, str):
            value = value.strip()
            if value.startswith("["):
                return json.loads(value)
            return [target.strip() for target in value.split(",") if target.strip()]
        return value

    @field_validator("knowledge_base_source")
    @classmethod
    def _check_kb_source(cls, value: str) -> str:
        if value not in ("file", "github"):
            raise ValueError(f"knowledge_base_source must be 'file' or 'github', got {value!r}")
        return value

    @model_validator(mode="after")
    def _require_targets(self):
        if self.action_mode != ActionMode.DIRECT_ANSWER and not self.notify_targets:
            raise ValueError(
                f"notify_targets must not be empty when action_mode is {self.action_mode.value}"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
