from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class BeanBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    roast_date: date | None = None
    notes: str = Field(default="", max_length=500)
    is_active: bool = True
    grinder_configuration_id: int | None = Field(default=None, gt=0)


class BeanCreate(BeanBase):
    pass


class BeanRead(BeanBase):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
