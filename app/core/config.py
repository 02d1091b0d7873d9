import os
import sys
import logging
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional, Literal


_BACKEND_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))
_DEFAULT_DATA_PATH = os.path.join(_BACKEND_ROOT, "data.json")
_DEFAULT_UPLOAD_DIR = os.path.join(_BACKEND_ROOT, "uploads", "jds")


class Settings(BaseSettings):
    # The defaults here provide a fully working local configuration so new
    # contributors can run the stack with only an API key in the environment.
    PROJECT_NAME: str = "Resume Enhancer"
    ENV: str = "local"
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173", "http://localhost:3000"]
    FRONTEND_PATH: Optional[str] = os.path.join(_BACKEND_ROOT, "frontend", "dist")
    # Role / JD key-value store
    DATA_FILE_PATH: str = _DEFAULT_DATA_PATH
    JD_UPLOAD_DIR: str = _DEFAULT_UPLOAD_DIR
    JD_MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    RESUME_MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024
    # Generative language provider
    LLM_PROVIDER: Optional[str] = "genai"
    LLM_API_KEY: Optional[str] = None
    LL_MODEL: Optional[str] = "gemini-1.5-flash-latest"
    LLM_TEMPERATURE: float = 0.7
    LLM_TOP_K: int = 1
    LLM_TOP_P: float = 1.0
    LLM_MAX_OUTPUT_TOKENS: int = 4096
    # Text extraction
    FETCH_TIMEOUT_SECONDS: float = 20.0
    FETCH_USER_AGENT: str = "Mozilla/5.0"
    MIN_EXTRACTED_TEXT_LENGTH: int = 50
    MAX_PROMPT_TEXT_CHARS: int = 30000
    # Enhancement jobs and streaming
    MAX_POINTS_PER_JOB: int = 50
    STREAM_CONNECT_GRACE_SECONDS: float = 0.2
    STREAM_TEARDOWN_DELAY_SECONDS: float = 5.0
    JOB_RETENTION_SECONDS: float = 3600.0

    model_config = SettingsConfigDict(
        env_file=os.path.join(os.path.dirname(__file__), os.pardir, os.pardir, ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


_LEVEL_BY_ENV: dict[Literal["production", "staging", "local"], int] = {
    "production": logging.INFO,
    "staging": logging.DEBUG,
    "local": logging.DEBUG,
}


def setup_logging() -> None:
    """
    Configure the root logger exactly once,

    * Console only (StreamHandler -> stderr)
    * ISO - 8601 timestamps
    * Env - based log level: production -> INFO, else DEBUG
    * Prevents duplicate handler creation if called twice
    """
    root = logging.getLogger()
    if root.handlers:
        return

    env = settings.ENV.lower()
    level = _LEVEL_BY_ENV.get(env, logging.INFO)

    formatter = logging.Formatter(
        fmt="[%(asctime)s - %(name)s - %(levelname)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root.setLevel(level)
    root.addHandler(handler)

    for noisy in ("httpx", "httpcore", "pdfminer", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
