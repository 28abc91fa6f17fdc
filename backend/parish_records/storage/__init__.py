from parish_records.storage.base import (  # noqa: F401
    Document,
    DocumentStore,
    Filter,
    StoreError,
    new_id,
    utcnow,
)
