from datetime import datetime
from sqlmodel import SQLModel, Field


class PrayerTimes(SQLModel):
    fajr: str | None = None
    dhuhr: str | None = None
    asr: str | None = None
    maghrib: str | None = None
    isha: str | None = None
    jummah: str | None = None


class MosqueBase(SQLModel):
    name: str = ""
    location: str = ""
    description: str = ""
    contact_email: str = ""
    contact_phone: str = ""


class MosqueRecord(MosqueBase):
    """A mosque as returned by the directory backend's mosque feed."""

    id: str
    verification_code: str = ""
    created_at: datetime | None = None
    prayer_times: PrayerTimes | None = None


class MosqueUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    location: str | None = Field(default=None, min_length=5, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
