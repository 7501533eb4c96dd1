"""
Uvicorn server runner with configurable logging.

Usage:
    python run.py

Environment variables (set in .env file):
    DEBUG=true - Enable debug logging
    PORT=8000 - Set server port (default: 8000)
    HOST=127.0.0.1 - Set server host (default: 127.0.0.1)
    MATCH_THRESHOLD=0.85 - Minimum confidence for an answer
    ACTION_MODE=direct_answer|approval_required|notify_only
    NOTIFY_TARGETS=C0123,U0456 - Approval/notification targets
"""

import uvicorn
from faqbot.config import get_settings

if __name__ == "__main__":
    import os

    # Load and validate settings before the server starts
    settings = get_settings()

    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))

    # Set log level based on DEBUG setting from .env
    log_level = "debug" if settings.debug else "info"

    print(f"Starting {settings.app_name} server...")
    print(f"Host: {host}")
    print(f"Port: {port}")
    print(f"Log Level: {log_level}")
    print(f"Action Mode: {settings.action_mode.value}")
    print(f"Match Threshold: {settings.match_threshold}")
    print(f"Docs available at: http://{host}:{port}/docs")

    uvicorn.run(
        "faqbot.main:app",
        host=host,
        port=port,
        reload=settings.debug,
        log_level=log_level,
        access_log=True,
    )
