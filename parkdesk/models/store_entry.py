# parkdesk/models/store_entry.py
"""
Key-value store table.
One row per store key (vehicleRegistry, activeVehicles, incomeRecords, ...).
The value column holds the JSON document for that key.
"""

from sqlalchemy import Column, String, DateTime, Text
from parkdesk.database import Base


class StoreEntry(Base):
    __tablename__ = "store_entries"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<StoreEntry {self.key} updated={self.updated_at}>"
