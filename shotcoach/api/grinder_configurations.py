from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shotcoach.core.constants import GRINDER_PRESETS
from shotcoach.core.database import get_db
from shotcoach.models.grinder_configuration import GrinderConfiguration
from shotcoach.schemas.grinder import GrinderConfigurationCreate, GrinderConfigurationRead, GrinderPresetRead
from shotcoach.services.grinder_scale import GrinderScale

router = APIRouter(prefix="/grinder-configurations", tags=["grinder-configurations"])


def _to_read(configuration: GrinderConfiguration) -> GrinderConfigurationRead:
    scale = GrinderScale.from_configuration(configuration)
    return GrinderConfigurationRead(
        id=configuration.id,
        scale_min=configuration.scale_min,
        scale_max=configuration.scale_max,
        step_size=configuration.step_size,
        created_at=configuration.created_at,
        valid_values=scale.valid_values(),
    )


@router.get("/presets", response_model=list[GrinderPresetRead])
def list_grinder_presets() -> list[GrinderPresetRead]:
    return [
        GrinderPresetRead(scale_min=scale_min, scale_max=scale_max, step_size=step_size)
        for scale_min, scale_max, step_size in GRINDER_PRESETS
    ]


@router.get("", response_model=list[GrinderConfigurationRead])
def list_grinder_configurations(db: Session = Depends(get_db)) -> list[GrinderConfigurationRead]:
    configurations = (
        db.query(GrinderConfiguration)
        .order_by(GrinderConfiguration.created_at.desc(), GrinderConfiguration.id.desc())
        .all()
    )
    return [_to_read(configuration) for configuration in configurations]


@router.post("", response_model=GrinderConfigurationRead, status_code=status.HTTP_201_CREATED)
def create_grinder_configuration(
    payload: GrinderConfigurationCreate,
    db: Session = Depends(get_db),
) -> GrinderConfigurationRead:
    configuration = GrinderConfiguration(**payload.model_dump())
    db.add(configuration)
    db.commit()
    db.refresh(configuration)
    return _to_read(configuration)
