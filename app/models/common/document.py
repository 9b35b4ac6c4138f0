"""Document table - JSON documents for every business entity type."""

DOCUMENT_DDL = """
CREATE TABLE IF NOT EXISTS document (
    entity VARCHAR NOT NULL,
    id VARCHAR NOT NULL,
    data JSON NOT NULL,
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL,
    PRIMARY KEY (entity, id)
)
"""

DOCUMENT_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_document_entity ON document(entity)",
]

# Entity type names double as cache key namespaces ("project", "project-<id>")
ENTITY_TYPES = (
    "project",
    "task",
    "invoice",
    "expense",
    "client",
    "user",
    "time_entry",
    "calendar_event",
    "file",
)

DASHBOARD_KEY = "dashboard"
