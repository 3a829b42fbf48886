# brokerdesk/schemas.py
from __future__ import annotations

import datetime as dt
import re
from datetime import datetime
from typing import Annotated, Literal, Optional, List, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, field_serializer


UserRole = Literal["broker", "channel_partner", "admin"]
SignupRole = Literal["broker", "channel_partner"]

ClientType = Literal["buyer", "seller", "tenant", "owner"]
ClientStatus = Literal["active", "converted", "inactive"]

PropertyType = Literal["apartment", "house", "commercial", "plot"]
ListingType = Literal["sale", "rent"]
PropertyStatus = Literal["available", "sold", "rented", "under_negotiation"]

AppointmentType = Literal["site_visit", "meeting", "call"]
AppointmentStatus = Literal["scheduled", "completed", "cancelled"]

_DATE_FORMAT = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_CLOCK_FORMAT = re.compile(r"^\d{2}:\d{2}$")


def _calendar_date(value: Any) -> Any:
    if isinstance(value, dt.date) and not isinstance(value, dt.datetime):
        return value
    if not isinstance(value, str) or not _DATE_FORMAT.match(value):
        raise ValueError("must be a date in YYYY-MM-DD format")
    return value


def _clock_time(value: Any) -> Any:
    # stored and returned as HH:MM, so nothing finer is accepted
    if isinstance(value, dt.time) and not (value.second or value.microsecond or value.tzinfo):
        return value
    if not isinstance(value, str) or not _CLOCK_FORMAT.match(value):
        raise ValueError("must be a time in HH:MM format")
    return value


AppointmentDate = Annotated[dt.date, BeforeValidator(_calendar_date)]
AppointmentTime = Annotated[dt.time, BeforeValidator(_clock_time)]


def patch_values(payload: BaseModel) -> dict[str, Any]:
    """Fields the caller actually sent; an explicit null counts as absent."""
    return {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}


# -------------------- Auth / Users --------------------

class SignupRequest(BaseModel):
    first_name: str = Field(min_length=2, max_length=100)
    last_name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)
    date_of_birth: str  # YYYY-MM-DD, parsed by the auth service

    firm_name: str = Field(min_length=2, max_length=255)
    role: SignupRole

    whatsapp_number: str = Field(min_length=10, max_length=20)
    alternative_number: Optional[str] = None
    foreign_number: Optional[str] = None

    address: str = Field(min_length=10)
    location: str = Field(min_length=2, max_length=255)
    city: str = Field(min_length=2, max_length=100)
    state: str = Field(min_length=2, max_length=100)
    postal_code: str = Field(min_length=4, max_length=20)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    firm_name: Optional[str] = Field(default=None, min_length=2, max_length=255)

    whatsapp_number: Optional[str] = Field(default=None, min_length=10, max_length=20)
    alternative_number: Optional[str] = None
    foreign_number: Optional[str] = None

    address: Optional[str] = Field(default=None, min_length=10)
    location: Optional[str] = Field(default=None, min_length=2, max_length=255)
    city: Optional[str] = Field(default=None, min_length=2, max_length=100)
    state: Optional[str] = Field(default=None, min_length=2, max_length=100)
    postal_code: Optional[str] = Field(default=None, min_length=4, max_length=20)


class UserOut(BaseModel):
    # no password_hash
    id: str
    first_name: str
    last_name: str
    email: str
    date_of_birth: Optional[dt.date] = None

    firm_name: str
    role: UserRole

    whatsapp_number: str
    alternative_number: Optional[str] = None
    foreign_number: Optional[str] = None

    address: str
    location: str
    city: str
    state: str
    postal_code: str

    profile_image: Optional[str] = None
    is_verified: bool
    is_active: bool

    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthOut(BaseModel):
    token: str
    user: UserOut


class ProfileImageOut(BaseModel):
    profile_image: str


# -------------------- Clients --------------------

class ClientCreate(BaseModel):
    first_name: str = Field(min_length=2, max_length=100)
    last_name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    phone: str = Field(min_length=10, max_length=20)

    type: ClientType

    preferred_location: str = Field(min_length=2, max_length=255)
    address: str = Field(min_length=10)
    city: str = Field(min_length=2, max_length=100)
    state: str = Field(min_length=2, max_length=100)
    postal_code: str = Field(min_length=4, max_length=20)

    requirements: str = Field(min_length=5)

    # sign rules live in domain.rules so the error reads the same on create and update
    budget_min: Optional[float] = Field(default=None, allow_inf_nan=False)
    budget_max: Optional[float] = Field(default=None, allow_inf_nan=False)
    notes: Optional[str] = None


class ClientUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, min_length=10, max_length=20)

    type: Optional[ClientType] = None
    status: Optional[ClientStatus] = None

    preferred_location: Optional[str] = Field(default=None, min_length=2, max_length=255)
    address: Optional[str] = Field(default=None, min_length=10)
    city: Optional[str] = Field(default=None, min_length=2, max_length=100)
    state: Optional[str] = Field(default=None, min_length=2, max_length=100)
    postal_code: Optional[str] = Field(default=None, min_length=4, max_length=20)

    requirements: Optional[str] = Field(default=None, min_length=5)

    budget_min: Optional[float] = Field(default=None, allow_inf_nan=False)
    budget_max: Optional[float] = Field(default=None, allow_inf_nan=False)
    notes: Optional[str] = None


class ClientOut(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    phone: str

    type: str
    status: str

    budget_min: Optional[float] = None
    budget_max: Optional[float] = None

    preferred_location: str
    address: str
    city: str
    state: str
    postal_code: str

    requirements: str
    notes: Optional[str] = None

    broker_id: str
    broker_name: Optional[str] = None
    broker_city: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# -------------------- Properties --------------------

class PropertyCreate(BaseModel):
    title: str = Field(min_length=5, max_length=255)
    type: PropertyType
    listing_type: ListingType

    price: float = Field(gt=0, allow_inf_nan=False)
    area: float = Field(gt=0, allow_inf_nan=False)

    # required for apartment/house, see domain.rules
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)

    location: str = Field(min_length=2, max_length=255)
    address: str = Field(min_length=10)
    city: str = Field(min_length=2, max_length=100)
    state: str = Field(min_length=2, max_length=100)

    description: str = Field(min_length=20)
    amenities: List[str] = Field(default_factory=list)


class PropertyUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=5, max_length=255)
    type: Optional[PropertyType] = None
    listing_type: Optional[ListingType] = None

    price: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    area: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)

    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)

    location: Optional[str] = Field(default=None, min_length=2, max_length=255)
    address: Optional[str] = Field(default=None, min_length=10)
    city: Optional[str] = Field(default=None, min_length=2, max_length=100)
    state: Optional[str] = Field(default=None, min_length=2, max_length=100)

    description: Optional[str] = Field(default=None, min_length=20)
    amenities: Optional[List[str]] = None

    status: Optional[PropertyStatus] = None


class PropertyOut(BaseModel):
    id: str
    title: str
    type: str
    listing_type: str

    price: float
    area: float

    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None

    location: str
    address: str
    city: str
    state: str

    description: str
    amenities: List[str] = Field(default_factory=list)

    status: str

    broker_id: str
    broker_name: Optional[str] = None
    broker_city: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# -------------------- Appointments --------------------

class AppointmentCreate(BaseModel):
    title: str = Field(min_length=5, max_length=255)
    description: Optional[str] = None
    date: AppointmentDate
    time: AppointmentTime
    client_id: str = Field(min_length=1)
    property_id: Optional[str] = None
    type: AppointmentType


class AppointmentUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=5, max_length=255)
    description: Optional[str] = None
    date: Optional[AppointmentDate] = None
    time: Optional[AppointmentTime] = None
    client_id: Optional[str] = None
    # "" detaches the property
    property_id: Optional[str] = None
    type: Optional[AppointmentType] = None
    status: Optional[AppointmentStatus] = None


class AppointmentOut(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    date: dt.date
    time: dt.time

    client_id: str
    property_id: Optional[str] = None
    broker_id: str

    type: str
    status: str

    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    property_address: Optional[str] = None
    broker_name: Optional[str] = None
    broker_city: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("time")
    def _hh_mm(self, value: dt.time) -> str:
        return value.strftime("%H:%M")


class AppointmentStatsOut(BaseModel):
    total_this_month: int = 0
    today_appointments: int = 0
    scheduled_appointments: int = 0
    completed_appointments: int = 0
    cancelled_appointments: int = 0
    appointments_by_type: dict[str, int] = Field(default_factory=dict)
