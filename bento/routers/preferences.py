"""
Preferences API router: category corrections feed the classifier.
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import Optional

from bento.dependencies import get_learner
from bento.models.transaction import TransactionDraft
from bento.services.preferences import PreferenceLearner, normalize_counterparty

router = APIRouter(prefix="/preferences", tags=["preferences"])


class CategoryEdit(BaseModel):
    """A user changed a transaction's category."""
    transaction: TransactionDraft
    original_category: str
    new_category: str


class CategoryEditResponse(BaseModel):
    learned: bool
    counterparty: Optional[str] = None


class PreferenceResponse(BaseModel):
    counterparty: str
    category: str


@router.post("/edits", response_model=CategoryEditResponse)
async def record_edit(edit: CategoryEdit, learner: PreferenceLearner = Depends(get_learner)):
    """Learn from a category correction when a counterparty can be recovered."""
    learned = learner.learn_from_edit(edit.transaction, edit.original_category, edit.new_category)

    counterparty = None
    if learned:
        counterparty = normalize_counterparty(learner.counterparty_for(edit.transaction))
    return CategoryEditResponse(learned=learned, counterparty=counterparty)


@router.get("/{counterparty}", response_model=PreferenceResponse)
async def get_preference(counterparty: str, learner: PreferenceLearner = Depends(get_learner)):
    """Look up the learned category for a counterparty."""
    category = learner.lookup(counterparty)
    if category is None:
        raise HTTPException(status_code=404, detail="No preference for counterparty")
    return PreferenceResponse(counterparty=normalize_counterparty(counterparty), category=category)
