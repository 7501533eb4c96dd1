import logging
from fastapi import FastAPI
from faqbot.config import get_settings
from faqbot.api.routes import questions, approvals

settings = get_settings()

# Configure application logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Set log level for app modules
logger = logging.getLogger("faqbot")
logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

app = FastAPI(
    title=settings.app_name,
    description="Answers repository and chat questions from a curated FAQ",
    version="0.1.0",
)

# Include routers
app.include_router(questions.router, prefix="/api/questions", tags=["Questions"])
app.include_router(approvals.router, prefix="/api/approvals", tags=["Approvals"])


@app.get("/")
async def root():
    return {
        "message": "Welcome to FAQ Bot",
        "version": "0.1.0",
        "action_mode": settings.action_mode.value,
        "endpoints": {
            "questions": "/api/questions",
            "approvals": "/api/approvals",
            "health": "/health",
            "docs": "/docs",
        },
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": settings.app_name}
