from review_summarizer.models.insights import CategoryBuckets, CategoryHit
from review_summarizer.models.review import ReviewRecord, ScrapeQuery

__all__ = ["ScrapeQuery", "ReviewRecord", "CategoryHit", "CategoryBuckets"]
