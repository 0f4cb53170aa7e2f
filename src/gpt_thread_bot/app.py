"""FastAPI application with lifespan and health endpoint."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from gpt_thread_bot.config import get_settings
from gpt_thread_bot.dependencies import build_services
from gpt_thread_bot.logging_config import configure_logging
from gpt_thread_bot.slack.router import router as slack_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging, build clients, close them on shutdown."""
    settings = get_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings
    app.state.services = build_services(settings)
    try:
        yield
    finally:
        await app.state.services.aclose()


app = FastAPI(
    title="GPT Thread Bot",
    lifespan=lifespan,
)
app.include_router(slack_router)


@app.get("/health")
async def health():
    """Health check endpoint for the hosting platform and local development."""
    return {
        "status": "ok",
        "service": "gpt-thread-bot",
        "version": "0.1.0",
    }


def run() -> None:
    """Serve the app with uvicorn on the configured port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
