# parkdesk/schemas/configuration.py
from pydantic import BaseModel


class EventFlag(BaseModel):
    active: bool


class EventFlagOut(EventFlag):
    date_key: str
