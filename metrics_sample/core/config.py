import os


class Settings:
    # API Settings
    PROJECT_NAME: str = "Metrics Sample API"
    VERSION: str = "1.0.0"
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", 8080))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Reported by GET /health
    RUNTIME_NAME: str = os.getenv("RUNTIME_NAME", "uvicorn")

    # Metrics Settings
    METRICS_BIND_RUNTIME: bool = os.getenv("METRICS_BIND_RUNTIME", "true").lower() == "true"
    METRICS_TYPE_COMMENTS: bool = os.getenv("METRICS_TYPE_COMMENTS", "false").lower() == "true"

    # Logging Settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    # Empty means metrics_sample/config/logs
    LOG_DIR: str = os.getenv("LOG_DIR", "")


settings = Settings()
