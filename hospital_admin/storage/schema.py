"""
Local Durable Storage Schema
One key-value table holding JSON snapshots of persisted aggregates.
"""

SCHEMA = """
-- =============================================================================
-- KV_STORE - One row per persisted aggregate (session, settings, users, language)
-- =============================================================================
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,

    -- JSON-serialized snapshot
    value TEXT,

    -- Metadata
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""

# Fixed storage keys
SESSION_KEY = "@hospital_auth"
SETTINGS_KEY = "@hospital_settings"
USERS_KEY = "@hospital_users"
LANGUAGE_KEY = "@hospital_language"
