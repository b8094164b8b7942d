"""Word lookup endpoints."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from synquiz.db.database import get_db
from synquiz.services.vocabulary import search_words

router = APIRouter(prefix="/api/words", tags=["words"])


@router.get("/search")
async def search(
    q: str = Query("", max_length=100, description="Text contained in a headword or synonym"),
    db: Session = Depends(get_db)
):
    """Search active words of every level."""
    results = search_words(db, q)
    return {
        "query": q,
        "count": len(results),
        "results": [entry.to_dict() for entry in results],
    }
