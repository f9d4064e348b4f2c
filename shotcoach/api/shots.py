from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from shotcoach.core.database import get_db
from shotcoach.core.exceptions import (
    BeanNotFoundError,
    GrinderConfigurationNotFoundError,
    InvalidGrinderConfigurationError,
    RecommendationAlreadyExistsError,
    ShotNotFoundError,
    ShotOutOfOrderError,
)
from shotcoach.models.shot import Shot
from shotcoach.schemas.recommendation import ShotRecommendationRead
from shotcoach.schemas.shot import RecordedShotRead, ShotCreate, ShotRead, ShotTasteUpdate
from shotcoach.services.recommendation_tracker import record_shot, record_taste_feedback

router = APIRouter(prefix="/shots", tags=["shots"])


def _get_shot_or_404(db: Session, shot_id: int) -> Shot:
    shot = db.get(Shot, shot_id)
    if not shot:
        raise HTTPException(status_code=404, detail="Shot not found")
    return shot


@router.get("", response_model=list[ShotRead])
def list_shots(bean_id: int | None = None, db: Session = Depends(get_db)) -> list[Shot]:
    query = db.query(Shot)
    if bean_id is not None:
        query = query.filter(Shot.bean_id == bean_id)
    return query.order_by(Shot.created_at.desc(), Shot.id.desc()).all()


@router.post("", response_model=RecordedShotRead, status_code=status.HTTP_201_CREATED)
def create_shot(payload: ShotCreate, db: Session = Depends(get_db)) -> RecordedShotRead:
    try:
        shot, recommendation, prior = record_shot(db, **payload.model_dump())
    except BeanNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except GrinderConfigurationNotFoundError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except InvalidGrinderConfigurationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors) from exc
    except (RecommendationAlreadyExistsError, ShotOutOfOrderError) as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    return RecordedShotRead(
        shot=ShotRead.model_validate(shot),
        recommendation=ShotRecommendationRead.model_validate(recommendation),
        previous_recommendation=ShotRecommendationRead.model_validate(prior) if prior else None,
    )


@router.get("/{shot_id}", response_model=ShotRead)
def get_shot(shot_id: int, db: Session = Depends(get_db)) -> Shot:
    return _get_shot_or_404(db, shot_id)


@router.get("/{shot_id}/recommendation", response_model=ShotRecommendationRead)
def get_shot_recommendation(shot_id: int, db: Session = Depends(get_db)) -> ShotRecommendationRead:
    shot = _get_shot_or_404(db, shot_id)
    if shot.recommendation is None:
        raise HTTPException(status_code=404, detail="Recommendation not found")
    return ShotRecommendationRead.model_validate(shot.recommendation)


@router.patch("/{shot_id}/taste", response_model=ShotRead)
def update_shot_taste(shot_id: int, payload: ShotTasteUpdate, db: Session = Depends(get_db)) -> Shot:
    try:
        return record_taste_feedback(
            db,
            shot_id,
            taste_primary=payload.taste_primary,
            taste_secondary=payload.taste_secondary,
        )
    except ShotNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/{shot_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_shot(shot_id: int, db: Session = Depends(get_db)) -> None:
    shot = _get_shot_or_404(db, shot_id)
    db.delete(shot)
    db.commit()
