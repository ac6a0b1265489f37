from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

REPO_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=str(REPO_ROOT / '.env'), env_file_encoding='utf-8', extra='ignore')

    app_name: str = 'WikiThreads'
    environment: str = 'dev'
    log_level: str = 'INFO'

    database_url: str = 'sqlite:///./backend/data/app.db'

    session_secret_key: str = 'change-me'
    session_cookie_name: str = 'wikithreads_session'
    session_max_age_seconds: int = 14 * 24 * 3600

    comment_body_min_length: int = 1
    comment_body_max_length: int = 2000
    comment_author_max_length: int = 80
    comment_preview_length: int = 200
    comment_page_size_default: int = 10
    comment_page_size_options_csv: str = '5,10,50,100,500'
    anonymous_can_comment: bool = True
    moderation_queue_limit: int = 100

    frontend_origin: str = 'http://localhost:3000'
    frontend_origins_csv: str = 'http://localhost:3000,http://127.0.0.1:3000'

    @property
    def repo_root(self) -> Path:
        return Path(__file__).resolve().parents[3]

    @property
    def backend_root(self) -> Path:
        return Path(__file__).resolve().parents[2]

    @property
    def resolved_database_url(self) -> str:
        if self.database_url.startswith('sqlite:///./'):
            rel_path = self.database_url.removeprefix('sqlite:///./')
            absolute_path = (self.repo_root / rel_path).resolve()
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            return f"sqlite:///{absolute_path.as_posix()}"
        return self.database_url

    @property
    def comment_page_size_options(self) -> list[int]:
        out: list[int] = []
        for raw in self.comment_page_size_options_csv.split(','):
            raw = raw.strip()
            if not raw.isdigit():
                continue
            value = int(raw)
            if value > 0 and value not in out:
                out.append(value)
        return out

    @property
    def frontend_origins(self) -> list[str]:
        raw = [s.strip() for s in self.frontend_origins_csv.split(',') if s.strip()]
        if self.frontend_origin and self.frontend_origin not in raw:
            raw.append(self.frontend_origin)
        seen: set[str] = set()
        out: list[str] = []
        for origin in raw:
            if origin in seen:
                continue
            seen.add(origin)
            out.append(origin)
        return out


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
