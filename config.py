from typing import Optional

from pydantic import PrivateAttr
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Loan File Co-Pilot API"
    debug: bool = False
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 3005

    database_url: str = "sqlite+aiosqlite:///./loan_files.db"
    cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173"

    # Live assistant; without a key every chat reply comes from the fallback assistant
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    openai_max_retries: int = 5
    openai_timeout_seconds: float = 30.0

    # Reject completed-requirement names that are not on the loan's resolved checklist
    strict_requirement_names: bool = True

    # Signature used in outbound email drafts
    sender_name: str = "Loan Processing Team"
    sender_title: str = "Private Lending Advisor"
    sender_company: str = ""
    sender_email: str = ""
    sender_phone: str = ""
    secure_portal_link: Optional[str] = None

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    _is_sqlite: bool = PrivateAttr(default=False)
    _is_postgresql: bool = PrivateAttr(default=False)

    def model_post_init(self, __context: object) -> None:
        _scheme = self.database_url.split(":")[0].lower()
        object.__setattr__(self, "_is_sqlite", "sqlite" in _scheme)
        object.__setattr__(self, "_is_postgresql", "postgresql" in _scheme)

    @property
    def is_sqlite(self) -> bool:
        return self._is_sqlite

    @property
    def is_postgresql(self) -> bool:
        return self._is_postgresql

    @property
    def openai_enabled(self) -> bool:
        return bool(self.openai_api_key)


settings = Settings()
