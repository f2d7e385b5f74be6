from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Query, status

from review_summarizer.models.review import ReviewRecord
from review_summarizer.services.review_service import ReviewService, parse_keywords

router = APIRouter()

GOOGLE_SCRAPE_DEFAULT_MAX = 80
GOOGLE_SCRAPE_MAX_CAP = 200


@lru_cache
def get_review_service() -> ReviewService:
    return ReviewService()


@router.get("/google-reviews", response_model=list[ReviewRecord], tags=["Reviews"])
async def get_google_reviews(
    name: str = Query(default=""),
    location: str = Query(default=""),
    max_results: int | None = Query(default=None, ge=1, le=500),
    keywords: str = Query(default=""),
    service: ReviewService = Depends(get_review_service),
) -> list[ReviewRecord]:
    try:
        return await service.google_reviews(
            name,
            location,
            max_results=max_results,
            keywords=parse_keywords(keywords),
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/google-scrape", response_model=list[ReviewRecord], tags=["Reviews"])
async def get_google_scrape(
    name: str = Query(default=""),
    location: str = Query(default=""),
    max_results: int = Query(default=GOOGLE_SCRAPE_DEFAULT_MAX, alias="max", ge=1),
    keywords: str = Query(default=""),
    service: ReviewService = Depends(get_review_service),
) -> list[ReviewRecord]:
    try:
        return await service.google_reviews(
            name,
            location,
            max_results=min(max_results, GOOGLE_SCRAPE_MAX_CAP),
            keywords=parse_keywords(keywords),
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/apartments-com", response_model=list[ReviewRecord], tags=["Reviews"])
async def get_apartments_com_reviews(
    name: str = Query(default=""),
    location: str = Query(default=""),
    service: ReviewService = Depends(get_review_service),
) -> list[ReviewRecord]:
    try:
        return await service.apartments_com(name, location)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/apartmentratings", response_model=list[ReviewRecord], tags=["Reviews"])
async def get_apartment_ratings_reviews(
    name: str = Query(default=""),
    location: str = Query(default=""),
    service: ReviewService = Depends(get_review_service),
) -> list[ReviewRecord]:
    try:
        return await service.apartment_ratings(name, location)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/summary", tags=["Summary"])
async def get_summary(
    name: str = Query(default=""),
    location: str = Query(default=""),
    google: bool = Query(default=True),
    apartments_com: bool = Query(default=True),
    apartmentratings: bool = Query(default=True),
    service: ReviewService = Depends(get_review_service),
) -> dict:
    try:
        return await service.summarize(
            name,
            location,
            use_google=google,
            use_apartments_com=apartments_com,
            use_apartment_ratings=apartmentratings,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
