from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from shotcoach.services.grinder_scale import validate_grinder_scale


class GrinderConfigurationBase(BaseModel):
    scale_min: float = Field(ge=0)
    scale_max: float = Field(gt=0, le=1000)
    step_size: float = Field(default=0.5, gt=0)

    @model_validator(mode="after")
    def check_scale(self) -> "GrinderConfigurationBase":
        errors = validate_grinder_scale(self.scale_min, self.scale_max, self.step_size)
        if errors:
            raise ValueError("; ".join(errors))
        return self


class GrinderConfigurationCreate(GrinderConfigurationBase):
    pass


class GrinderConfigurationRead(GrinderConfigurationBase):
    id: int
    created_at: datetime
    valid_values: list[float] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class GrinderPresetRead(BaseModel):
    scale_min: float
    scale_max: float
    step_size: float
