# ParkDesk: Database Models
# Import all models here for SQLAlchemy discovery

from parkdesk.models.store_entry import StoreEntry     # noqa
