from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    APP_NAME: str = "DocuMind"
    ENV: str = "local"
    DATA_DIR: str = "./data"
    DB_PATH: str = "./data/documind.sqlite3"

    # llm
    LLM_PROVIDER: str = "openrouter"  # openrouter|openai
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENROUTER_API_KEY: str | None = None
    OPENROUTER_MODEL: str = "anthropic/claude-3.5-sonnet"
    # sent as HTTP-Referer / X-Title for openrouter app attribution
    OPENROUTER_REFERER: str = "http://localhost:3000"
    OPENROUTER_TITLE: str = "DocuMind"
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    # seconds; whole request / connect phase
    LLM_TIMEOUT: float = 120.0
    LLM_CONNECT_TIMEOUT: float = 10.0

    # q&a knobs
    QA_TOP_K: int = 5
    # Q/A pairs carried in the request before the conversation is summarized
    QA_MESSAGE_LIMIT: int = 10
    CONTEXT_CHARS_SINGLE: int = 8000
    CONTEXT_CHARS_MULTI: int = 2000

    # analysis
    ANALYSIS_MAX_CHARS: int = 15000

    # searchable index
    SEARCH_RAW_TEXT_CHARS: int = 10000
    SEARCH_MAX_TOKENS: int = 5000
    SEARCH_MAX_TOKEN_BYTES: int = 500

    # uploads
    MAX_UPLOAD_BYTES: int = 20 * 1024 * 1024

    # CORS (for browser-based UIs)
    # Comma-separated list of allowed origins.
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173"

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
