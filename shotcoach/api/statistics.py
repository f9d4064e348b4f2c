from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shotcoach.core.constants import TREND_WINDOW_DAYS
from shotcoach.core.database import get_db
from shotcoach.schemas.statistics import (
    BrewRatioResult,
    ExtractionTimeResult,
    GrinderSettingResult,
    QualityResult,
    ShotTrendsResult,
)
from shotcoach.services.shot_statistics import (
    analyze_brew_ratio,
    analyze_extraction_time,
    analyze_grinder_settings,
    analyze_quality,
    analyze_trends,
    list_shots,
)

router = APIRouter(prefix="/statistics", tags=["statistics"])


@router.get("/brew-ratio", response_model=BrewRatioResult)
def get_brew_ratio_analysis(bean_id: int | None = None, db: Session = Depends(get_db)):
    return analyze_brew_ratio(list_shots(db, bean_id=bean_id))


@router.get("/extraction-time", response_model=ExtractionTimeResult)
def get_extraction_time_analysis(bean_id: int | None = None, db: Session = Depends(get_db)):
    return analyze_extraction_time(list_shots(db, bean_id=bean_id))


@router.get("/trends", response_model=ShotTrendsResult)
def get_shot_trends(
    bean_id: int | None = None,
    days: int = Query(TREND_WINDOW_DAYS, ge=1, le=3650),
    db: Session = Depends(get_db),
):
    return analyze_trends(list_shots(db, bean_id=bean_id), days=days, until=datetime.utcnow())


@router.get("/grinder-settings", response_model=GrinderSettingResult)
def get_grinder_setting_analysis(bean_id: int | None = None, db: Session = Depends(get_db)):
    return analyze_grinder_settings(list_shots(db, bean_id=bean_id))


@router.get("/quality", response_model=QualityResult)
def get_quality_analysis(bean_id: int | None = None, db: Session = Depends(get_db)):
    return analyze_quality(list_shots(db, bean_id=bean_id))
