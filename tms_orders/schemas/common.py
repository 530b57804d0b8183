from pydantic import BaseModel, Field
from typing import Optional

class Location(BaseModel):
    lat: float = Field(..., description="Latitude", ge=-90, le=90)
    lng: float = Field(..., description="Longitude", ge=-180, le=180)

class EntityRef(BaseModel):
    id: Optional[int] = None

class AddressInput(BaseModel):
    id: Optional[int] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    postal_code: Optional[str] = None
    country_id: Optional[int] = None
    city_id: Optional[int] = None
    district_id: Optional[int] = None
    ward_id: Optional[int] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @property
    def has_data(self) -> bool:
        """True when any field besides the id is set; a bare id is a plain reference."""
        return any(value is not None for value in self.model_dump(exclude={"id"}).values())
