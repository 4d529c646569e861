"""
Metrics Sample API Server

Exposes GET /health and GET /metrics (Prometheus text format) on uvicorn.

Environment Variables:
    HOST: Server host address (default: 0.0.0.0)
    PORT: Server port (default: 8080)
    DEBUG: Enable debug mode with auto-reload (default: false)
    RUNTIME_NAME: Runtime name reported by /health (default: uvicorn)
    METRICS_BIND_RUNTIME: Register runtime/host gauges at startup (default: true)
    METRICS_TYPE_COMMENTS: Emit '# TYPE' lines on /metrics (default: false)
    LOG_LEVEL: Root log level (default: INFO)
    LOG_DIR: Directory for the rotating log file (default: metrics_sample/config/logs)

CLI Usage:
    python main.py

    # Scrape without runtime gauges
    METRICS_BIND_RUNTIME=false python main.py
"""

import os

import uvicorn

from metrics_sample.core.config import settings
from metrics_sample.core.logging_config import get_logger

logger = get_logger("main")

if __name__ == "__main__":
    # Get configuration from settings
    port = settings.PORT
    host = settings.HOST

    logger.info(f"Starting {settings.PROJECT_NAME} with detected vCPUs: {os.cpu_count()}")
    logger.info(f"Metrics available at http://{host}:{port}/metrics")
    logger.info(f"Health available at http://{host}:{port}/health")

    # If reload is enabled, restrict watch scope to backend code only.
    reload_enabled = bool(settings.DEBUG)
    reload_dirs = None
    if reload_enabled:
        from pathlib import Path

        repo_root = Path(__file__).resolve().parent
        reload_dirs = [str(repo_root / "metrics_sample")]

    uvicorn.run(
        "metrics_sample.app:app",
        host=host,
        port=port,
        reload=reload_enabled,
        reload_dirs=reload_dirs,
    )
