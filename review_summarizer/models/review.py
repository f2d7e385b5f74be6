from pydantic import BaseModel, ConfigDict, Field


class ScrapeQuery(BaseModel):
    subject_name: str
    location_hint: str
    max_results: int = Field(gt=0)
    time_budget_ms: int = Field(gt=0)

    model_config = ConfigDict(frozen=True)

    @property
    def search_text(self) -> str:
        return f"{self.subject_name} {self.location_hint}".strip()


class ReviewRecord(BaseModel):
    text: str = Field(min_length=1)
    source_url: str = Field(default="", alias="url")
    source: str = ""

    model_config = ConfigDict(frozen=True, populate_by_name=True)
