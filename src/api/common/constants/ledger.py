from enum import Enum
from sqlalchemy.dialects.postgresql import ENUM


class LedgerEntryStatus(str, Enum):
    PENDING = "PENDING"
    SETTLED = "SETTLED"
    CANCELED = "CANCELED"


ledger_entry_status_enum = ENUM(
    *[x.value for x in LedgerEntryStatus],
    name='ledgerentrystatus',
    create_type=False  # Important: let migrations handle type creation
)
