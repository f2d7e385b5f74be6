from pydantic import BaseModel, Field


class CategoryHit(BaseModel):
    sentence: str
    source: str = ""
    url: str = ""


class CategoryBuckets(BaseModel):
    security: list[CategoryHit] = Field(default_factory=list)
    pet: list[CategoryHit] = Field(default_factory=list)
    amenity: list[CategoryHit] = Field(default_factory=list)
    safety: list[CategoryHit] = Field(default_factory=list)

    def counts(self) -> dict[str, int]:
        return {
            "security": len(self.security),
            "pet": len(self.pet),
            "amenity": len(self.amenity),
            "safety": len(self.safety),
        }
