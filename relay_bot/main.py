import asyncio
from fastapi import FastAPI, Request, Header, HTTPException

from relay_bot import __version__
from relay_bot.config import get_settings
from relay_bot.telegram_bot.bot import handle_telegram_update, initialize_bot, shutdown_bot
from relay_bot.telegram_bot.logging_config import bot_logger as logger, setup_logging

app = FastAPI(
    title="Gemini Relay Bot",
    description="Telegram webhook receiver for the Gemini relay bot",
    version=__version__
)

# Keep references to in-flight update tasks so they are not garbage collected
_update_tasks: set[asyncio.Task] = set()


# Lifecycle events
@app.on_event("startup")
async def startup_event():
    """Initialize bot on startup."""
    setup_logging(get_settings().log_level)
    logger.info("[STARTUP] Initializing Telegram bot...")
    await initialize_bot()
    logger.info("[STARTUP] Bot ready")


@app.on_event("shutdown")
async def shutdown_event():
    """Shutdown bot on application shutdown."""
    logger.info("[SHUTDOWN] Shutting down Telegram bot...")
    await shutdown_bot()
    logger.info("[SHUTDOWN] Bot stopped")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    settings = get_settings()
    return {
        "status": "ok",
        "environment": settings.environment,
        "version": __version__
    }


# Telegram webhook endpoint
@app.post("/telegram/webhook")
async def telegram_webhook(
    request: Request,
    x_telegram_bot_api_secret_token: str = Header(None)
):
    """
    Webhook endpoint for Telegram updates.

    Telegram sends updates here when messages arrive.
    """
    settings = get_settings()

    # Verify secret token if configured
    if settings.telegram_webhook_secret:
        if x_telegram_bot_api_secret_token != settings.telegram_webhook_secret:
            raise HTTPException(status_code=403, detail="Invalid secret token")

    update_data = await request.json()

    # Handle update in background (fire-and-forget for fast 200 OK)
    task = asyncio.create_task(handle_telegram_update(update_data))
    _update_tasks.add(task)
    task.add_done_callback(_update_tasks.discard)

    return {"ok": True}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
