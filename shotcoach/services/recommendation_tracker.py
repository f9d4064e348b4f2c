"""Persistence of grind recommendations and follow-through evaluation.

Each shot owns exactly one ``ShotRecommendation``. The recommendation for a
bean's most recent shot is that bean's next-shot guidance; there is no
separately cached guidance row. When the next shot for the bean arrives the
prior recommendation is evaluated once and ``was_followed`` is frozen.

Lower-level helpers only flush; ``record_shot`` and ``record_taste_feedback``
own the transaction.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shotcoach.core.constants import (
    FOLLOW_THROUGH_TOLERANCE,
    ConfidenceLevel,
    TastePrimary,
    TasteSecondary,
)
from shotcoach.core.exceptions import (
    BeanNotFoundError,
    GrinderConfigurationNotFoundError,
    RecommendationAlreadyExistsError,
    ShotNotFoundError,
    ShotOutOfOrderError,
)
from shotcoach.models.bean import Bean
from shotcoach.models.grinder_configuration import GrinderConfiguration
from shotcoach.models.shot import Shot
from shotcoach.models.shot_recommendation import ShotRecommendation
from shotcoach.schemas.recommendation import FollowThroughSummaryRead
from shotcoach.services.grind_recommender import recommend
from shotcoach.services.grinder_scale import GrinderScale
from shotcoach.services.observability import observability_tracker
from shotcoach.services.taste_correlator import predict_taste

logger = logging.getLogger("shotcoach.recommendations")

_TOLERANCE_EPSILON = 1e-9


def _log_event(event: str, **fields) -> None:
    payload = {"event": event, **fields}
    logger.info(json.dumps(payload, default=str))


def _pct(part: int, whole: int) -> float | None:
    if whole == 0:
        return None
    return round(part / whole * 100, 2)


def resolve_grinder_configuration(db: Session, bean: Bean) -> GrinderConfiguration:
    if bean.grinder_configuration is not None:
        return bean.grinder_configuration

    configuration = (
        db.query(GrinderConfiguration)
        .order_by(GrinderConfiguration.created_at.desc(), GrinderConfiguration.id.desc())
        .first()
    )
    if configuration is None:
        raise GrinderConfigurationNotFoundError(bean_id=bean.id)
    return configuration


def create_recommendation_for_shot(db: Session, shot: Shot, scale: GrinderScale) -> ShotRecommendation:
    existing = db.query(ShotRecommendation.id).filter(ShotRecommendation.shot_id == shot.id).first()
    if existing is not None:
        _log_event("recommendation_duplicate_rejected", shot_id=shot.id, bean_id=shot.bean_id)
        raise RecommendationAlreadyExistsError(shot.id)

    result = recommend(shot, scale)
    metadata = {
        "previous_grind_setting": result.previous_grind_setting,
        "extraction_time_deviation": result.extraction_time_deviation,
        "predicted_taste": predict_taste(shot.extraction_time_seconds),
        "taste_issue": result.taste_issue,
        "clamped": result.clamped,
    }

    recommendation = ShotRecommendation(
        shot_id=shot.id,
        recommended_grind_setting=result.suggested_grind_setting,
        adjustment_direction=result.adjustment_direction,
        adjustment_steps=result.adjustment_steps,
        confidence_level=result.confidence_level,
        reason_code=result.reason_code,
        was_followed=False,
        metadata_json=json.dumps(metadata, default=str),
    )
    # Read before flushing: a failed flush expires the shot.
    shot_id, bean_id = shot.id, shot.bean_id
    db.add(recommendation)
    try:
        db.flush()
    except IntegrityError as exc:
        _log_event("recommendation_duplicate_rejected", shot_id=shot_id, bean_id=bean_id)
        raise RecommendationAlreadyExistsError(shot_id) from exc

    _log_event(
        "recommendation_created",
        recommendation_id=recommendation.id,
        shot_id=shot.id,
        bean_id=shot.bean_id,
        direction=result.adjustment_direction.value,
        steps=result.adjustment_steps,
        confidence=result.confidence_level.value,
        reason=result.reason_code.value,
        suggested_grind_setting=result.suggested_grind_setting,
    )
    return recommendation


def is_within_tolerance(grinder_setting: float, recommended_setting: float) -> bool:
    return abs(grinder_setting - recommended_setting) <= FOLLOW_THROUGH_TOLERANCE + _TOLERANCE_EPSILON


def evaluate_follow_through(db: Session, new_shot: Shot, prior: ShotRecommendation) -> bool:
    """Mark ``prior`` followed or ignored based on ``new_shot``.

    Only the first evaluation counts; later calls return the stored outcome
    without touching the row.
    """
    if prior.evaluated_at is not None:
        return prior.was_followed

    if prior.shot_id == new_shot.id:
        raise ValueError("A shot cannot follow through on its own recommendation")
    if prior.shot.bean_id != new_shot.bean_id:
        raise ValueError("Follow-through is only evaluated within the same bean")

    prior.was_followed = is_within_tolerance(new_shot.grinder_setting, prior.recommended_grind_setting)
    prior.evaluated_at = datetime.utcnow()
    db.flush()

    _log_event(
        "follow_through_evaluated",
        recommendation_id=prior.id,
        shot_id=new_shot.id,
        bean_id=new_shot.bean_id,
        recommended_grind_setting=prior.recommended_grind_setting,
        actual_grind_setting=new_shot.grinder_setting,
        was_followed=prior.was_followed,
    )
    return prior.was_followed


def get_prior_recommendation(
    db: Session,
    bean_id: int,
    exclude_shot_id: int | None = None,
) -> ShotRecommendation | None:
    query = (
        db.query(ShotRecommendation)
        .join(Shot, Shot.id == ShotRecommendation.shot_id)
        .filter(Shot.bean_id == bean_id)
    )
    if exclude_shot_id is not None:
        query = query.filter(Shot.id != exclude_shot_id)
    return query.order_by(Shot.created_at.desc(), Shot.id.desc()).first()


def get_latest_shot(db: Session, bean_id: int) -> Shot | None:
    return (
        db.query(Shot)
        .filter(Shot.bean_id == bean_id)
        .order_by(Shot.created_at.desc(), Shot.id.desc())
        .first()
    )


def get_next_shot_guidance(db: Session, bean_id: int) -> ShotRecommendation | None:
    latest_shot = get_latest_shot(db, bean_id)
    if latest_shot is None:
        return None
    return latest_shot.recommendation


def record_shot(
    db: Session,
    *,
    bean_id: int,
    dose_grams: float,
    yield_grams: float,
    grinder_setting: float,
    extraction_time_seconds: int | None = None,
    notes: str = "",
    taste_primary: TastePrimary | None = None,
    taste_secondary: TasteSecondary | None = None,
    created_at: datetime | None = None,
) -> tuple[Shot, ShotRecommendation, ShotRecommendation | None]:
    """Save a shot, create its recommendation and evaluate the prior one.

    Everything happens in one transaction: on any failure nothing is kept.
    Returns ``(shot, recommendation, evaluated_prior_or_None)``.
    """
    bean = db.get(Bean, bean_id)
    if bean is None:
        raise BeanNotFoundError(bean_id)

    # A bean's shot history only grows forward in time.
    latest_shot = get_latest_shot(db, bean_id)
    created_at = created_at or datetime.utcnow()
    if latest_shot is not None and created_at < latest_shot.created_at:
        raise ShotOutOfOrderError(bean_id, latest_shot.created_at)

    try:
        scale = GrinderScale.from_configuration(resolve_grinder_configuration(db, bean))
        prior = get_prior_recommendation(db, bean_id)

        shot = Shot(
            bean_id=bean_id,
            dose_grams=dose_grams,
            yield_grams=yield_grams,
            extraction_time_seconds=extraction_time_seconds,
            grinder_setting=grinder_setting,
            notes=notes,
            taste_primary=taste_primary,
            taste_secondary=taste_secondary,
            created_at=created_at,
        )
        db.add(shot)
        db.flush()

        recommendation = create_recommendation_for_shot(db, shot, scale)

        if prior is not None:
            evaluate_follow_through(db, shot, prior)

        db.commit()
    except Exception:
        db.rollback()
        raise

    observability_tracker.record_recommendation(recommendation.confidence_level.value)
    if prior is not None:
        observability_tracker.record_follow_through(prior.was_followed)

    db.refresh(shot)
    db.refresh(recommendation)
    if prior is not None:
        db.refresh(prior)
    return shot, recommendation, prior


def record_taste_feedback(
    db: Session,
    shot_id: int,
    taste_primary: TastePrimary | None,
    taste_secondary: TasteSecondary | None = None,
) -> Shot:
    shot = db.get(Shot, shot_id)
    if shot is None:
        raise ShotNotFoundError(shot_id)

    shot.taste_primary = taste_primary
    shot.taste_secondary = taste_secondary
    db.commit()
    db.refresh(shot)
    return shot


def summarize_follow_through(db: Session, bean_id: int | None = None) -> FollowThroughSummaryRead:
    query = db.query(ShotRecommendation).join(Shot, Shot.id == ShotRecommendation.shot_id)
    if bean_id is not None:
        query = query.filter(Shot.bean_id == bean_id)
    recommendations = query.all()

    evaluated = [item for item in recommendations if item.evaluated_at is not None]
    followed = [item for item in evaluated if item.was_followed]
    high_evaluated = [item for item in evaluated if item.confidence_level == ConfidenceLevel.HIGH]
    high_followed = [item for item in high_evaluated if item.was_followed]

    return FollowThroughSummaryRead(
        bean_id=bean_id,
        total_recommendations=len(recommendations),
        evaluated_recommendations=len(evaluated),
        followed_recommendations=len(followed),
        follow_rate_pct=_pct(len(followed), len(evaluated)),
        high_confidence_evaluated=len(high_evaluated),
        high_confidence_followed=len(high_followed),
        high_confidence_follow_rate_pct=_pct(len(high_followed), len(high_evaluated)),
    )
