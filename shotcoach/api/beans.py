from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from shotcoach.core.constants import (
    OPTIMAL_EXTRACTION_MAX_SECONDS,
    OPTIMAL_EXTRACTION_MIN_SECONDS,
    TASTE_REASON_CODES,
)
from shotcoach.core.database import get_db
from shotcoach.models.bean import Bean
from shotcoach.models.grinder_configuration import GrinderConfiguration
from shotcoach.schemas.bean import BeanCreate, BeanRead
from shotcoach.schemas.recommendation import (
    FollowThroughSummaryRead,
    NextShotGuidanceRead,
    ShotRecommendationRead,
)
from shotcoach.services.recommendation_tracker import get_next_shot_guidance, summarize_follow_through

router = APIRouter(prefix="/beans", tags=["beans"])


def get_bean_or_404(db: Session, bean_id: int) -> Bean:
    bean = db.get(Bean, bean_id)
    if not bean:
        raise HTTPException(status_code=404, detail="Bean not found")
    return bean


@router.get("", response_model=list[BeanRead])
def list_beans(active_only: bool = False, db: Session = Depends(get_db)) -> list[Bean]:
    query = db.query(Bean)
    if active_only:
        query = query.filter(Bean.is_active.is_(True))
    return query.order_by(Bean.name.asc()).all()


@router.post("", response_model=BeanRead, status_code=status.HTTP_201_CREATED)
def create_bean(payload: BeanCreate, db: Session = Depends(get_db)) -> Bean:
    if db.query(Bean.id).filter(Bean.name == payload.name).first():
        raise HTTPException(status_code=409, detail="A bean with this name already exists")
    if payload.grinder_configuration_id is not None and not db.get(
        GrinderConfiguration, payload.grinder_configuration_id
    ):
        raise HTTPException(status_code=404, detail="Grinder configuration not found")

    bean = Bean(**payload.model_dump())
    db.add(bean)
    db.commit()
    db.refresh(bean)
    return bean


@router.get("/{bean_id}", response_model=BeanRead)
def get_bean(bean_id: int, db: Session = Depends(get_db)) -> Bean:
    return get_bean_or_404(db, bean_id)


@router.delete("/{bean_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_bean(bean_id: int, db: Session = Depends(get_db)) -> None:
    bean = get_bean_or_404(db, bean_id)
    db.delete(bean)
    db.commit()


@router.get("/{bean_id}/guidance", response_model=NextShotGuidanceRead)
def get_bean_guidance(bean_id: int, db: Session = Depends(get_db)) -> NextShotGuidanceRead:
    get_bean_or_404(db, bean_id)

    recommendation = get_next_shot_guidance(db, bean_id)
    if recommendation is None:
        raise HTTPException(status_code=404, detail="No guidance available for this bean yet")

    return NextShotGuidanceRead(
        bean_id=bean_id,
        based_on_shot_id=recommendation.shot_id,
        based_on_taste=recommendation.reason_code in TASTE_REASON_CODES,
        target_extraction_time_min=OPTIMAL_EXTRACTION_MIN_SECONDS,
        target_extraction_time_max=OPTIMAL_EXTRACTION_MAX_SECONDS,
        recommendation=ShotRecommendationRead.model_validate(recommendation),
    )


@router.get("/{bean_id}/follow-through", response_model=FollowThroughSummaryRead)
def get_bean_follow_through(bean_id: int, db: Session = Depends(get_db)) -> FollowThroughSummaryRead:
    get_bean_or_404(db, bean_id)
    return summarize_follow_through(db, bean_id=bean_id)
