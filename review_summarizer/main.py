import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from review_summarizer.config import settings
from review_summarizer.routers.health import router as health_router
from review_summarizer.routers.reviews import router as reviews_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    description="API for collecting property reviews and summarizing security-related signals.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(reviews_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("review_summarizer.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())
