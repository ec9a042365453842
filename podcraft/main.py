from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from podcraft import __version__
from podcraft.config import get_settings
from podcraft.utils.logging_config import setup_logging
from podcraft.utils.logger import get_logger

# Setup logging configuration
setup_logging()
logger = get_logger(__name__)
settings = get_settings()

app = FastAPI(
    title=settings.APP_NAME,
    description="""
    ## 🎙️ Podcraft API

    Turn articles and notes into narrated podcasts.

    ### ✨ Key Features
    - **Content Scraping**: Extract article text from a URL
    - **Script Generation**: Write a podcast script with Gemini, OpenAI, Anthropic or Ollama
    - **Speech Synthesis**: Narrate long scripts with Azure or ElevenLabs, falling back between providers
    - **Error Insight**: Inspect the recent classified error log
    """,
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def load_routers():
    """Include API routers."""
    from podcraft.routers import health, podcast

    for router_name, router in (("podcast", podcast.router), ("health", health.router)):
        app.include_router(router)
        logger.info(f"✅ Loaded {router_name} router")


load_routers()

# Serve generated audio under the locator prefix LocalAudioStore returns
audio_dir = Path(settings.AUDIO_OUTPUT_DIR)
audio_dir.mkdir(parents=True, exist_ok=True)
app.mount(settings.AUDIO_URL_PREFIX, StaticFiles(directory=str(audio_dir)), name="audio")


@app.on_event("startup")
async def startup_event():
    configured = [name for name, ok in settings.configured_services.items() if ok]
    if configured:
        logger.info(f"✅ Configured providers: {', '.join(configured)}")
    else:
        logger.warning("⚠️ No external providers configured; only keyless extractors are available")
    logger.info(f"🚀 {settings.APP_NAME} {__version__} started ({settings.ENVIRONMENT})")


@app.get("/")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": __version__,
        "docs": "/docs",
        "features": "Scrape, script and narrate podcasts with multi-provider fallback",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("podcraft.main:app", host="0.0.0.0", port=8000, reload=settings.ENVIRONMENT == "development")
