from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from tradeshield.api.dependencies import get_db, read_json_body
from tradeshield.schemas.analyze_schemas import FeedbackStats, SubmitFeedbackRequest
from tradeshield.services.feedback_service import get_feedback_stats, submit_feedback
from tradeshield.utils.logging_config import StructuredLogger

logger = StructuredLogger(__name__)

router = APIRouter(prefix="/api/feedback", tags=["feedback"])


@router.post("")
async def submit_analysis_feedback(request: Request, db: Session = Depends(get_db)):
    """
    Report how a past analysis held up once the trade happened.

    Feedback rows are deleted together with the analysis they reference.
    """
    body: SubmitFeedbackRequest = await read_json_body(request, SubmitFeedbackRequest)

    feedback = await run_in_threadpool(
        submit_feedback,
        db=db,
        analysis_id=body.analysis_id,
        was_accurate=body.was_accurate,
        actual_outcome=body.actual_outcome,
        comments=body.comments,
    )
    if feedback is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis not found")

    logger.info(
        "Feedback submitted",
        analysis_id=body.analysis_id,
        was_accurate=body.was_accurate,
        actual_outcome=body.actual_outcome,
    )

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={
            "success": True,
            "data": {"id": feedback.id, "analysisId": feedback.analysis_id},
        },
    )


@router.get("/stats", response_model=FeedbackStats)
def feedback_statistics(
    days: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db),
):
    """Accuracy of stored analyses over the last ``days`` days."""
    return FeedbackStats(**get_feedback_stats(db=db, days=days))
