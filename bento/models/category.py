"""
Pydantic models for the category keyword catalog.
"""

from typing import List

from pydantic import BaseModel, Field


class CategoryRule(BaseModel):
    """One category with its keyword list and score weight."""
    name: str = Field(min_length=1)
    keywords: List[str]
    weight: float = 1.0


class CategoryCatalog(BaseModel):
    """
    Ordered keyword table consumed by CategoryClassifier.

    Rule order matters: on equal scores the first-declared rule wins.
    """
    version: str = "1"
    rules: List[CategoryRule]

    def names(self) -> List[str]:
        return [rule.name for rule in self.rules]
