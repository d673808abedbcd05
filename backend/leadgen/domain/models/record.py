"""
Record Domain Models
Leads collected in the field by agents
"""
from pydantic import BaseModel, ConfigDict, Field, AliasChoices
from typing import Optional
from datetime import date, datetime


class GeoFix(BaseModel):
    """GPS fix captured with a record"""
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    accuracy: float = Field(..., ge=0.0, description="Accuracy radius in meters")


class RecordCreate(BaseModel):
    """Create record request"""
    agent_id: str = Field(..., min_length=1, validation_alias=AliasChoices("agent_id", "officer_id"))
    area_of_activity: str = Field(..., min_length=1)
    ward: str = Field(..., min_length=1)
    gps: Optional[GeoFix] = None
    lead_name: str = Field(..., min_length=1)
    phone_contact: str = Field(..., min_length=1)
    residence: str = Field(..., min_length=1)
    interested_phone_model: str = Field(..., min_length=1)
    next_contact_date: date

    def to_row(self) -> dict:
        """Flatten into the `leads` table column layout"""
        row = {
            "officer_id": self.agent_id,
            "area_of_activity": self.area_of_activity,
            "ward": self.ward,
            "gps_latitude": None,
            "gps_longitude": None,
            "gps_accuracy": None,
            "lead_name": self.lead_name,
            "phone_contact": self.phone_contact,
            "residence": self.residence,
            "interested_phone_model": self.interested_phone_model,
            "next_contact_date": self.next_contact_date.isoformat(),
        }
        if self.gps:
            row["gps_latitude"] = self.gps.latitude
            row["gps_longitude"] = self.gps.longitude
            row["gps_accuracy"] = self.gps.accuracy
        return row


class Record(BaseModel):
    """Collected lead owned by exactly one agent"""
    id: str
    agent_id: str = Field(..., validation_alias=AliasChoices("agent_id", "officer_id"))
    area_of_activity: str
    ward: str
    gps_latitude: Optional[float] = None
    gps_longitude: Optional[float] = None
    gps_accuracy: Optional[float] = None
    lead_name: str
    phone_contact: str
    residence: str
    interested_phone_model: str
    next_contact_date: date
    created_at: datetime

    model_config = ConfigDict(extra="ignore")

    @property
    def gps(self) -> Optional[GeoFix]:
        if self.gps_latitude is None or self.gps_longitude is None:
            return None
        return GeoFix(
            latitude=self.gps_latitude,
            longitude=self.gps_longitude,
            accuracy=self.gps_accuracy or 0.0,
        )
