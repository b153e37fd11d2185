"""Catalog endpoints — questions and treatments.

Read-only views of the loaded catalog.  They don't require a visitor id
since the data is public content.  Answer tags are not exposed.
"""

from fastapi import APIRouter, Depends

from treatment_finder.catalog import CatalogStore
from treatment_finder.models.session import QuestionPayload

from treatment_finder_server.dependencies import get_store

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/questions")
def list_questions(
    store: CatalogStore = Depends(get_store),
) -> list[QuestionPayload]:
    """Return every question in presentation order with its answer options.

    Same shape as the ``question`` field of a quiz step.
    """
    return [QuestionPayload.from_question(q) for q in store.get_questions()]


@router.get("/treatments")
def list_treatments(
    store: CatalogStore = Depends(get_store),
) -> list[dict]:
    """Return every treatment's display fields in catalog order."""
    return [
        {
            "id": t.id,
            "name": t.name,
            "description": t.description,
            "benefits": t.benefits,
            "price": t.price,
            "link": t.link,
        }
        for t in store.get_treatments()
    ]
