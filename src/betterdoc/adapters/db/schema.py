"""Application database schema."""

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS team_memberships (
    team_id UUID NOT NULL,
    user_id UUID NOT NULL,
    role TEXT NOT NULL,
    assigned_by UUID,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    PRIMARY KEY (team_id, user_id)
);

CREATE TABLE IF NOT EXISTS team_invites (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    team_id UUID NOT NULL,
    kind TEXT NOT NULL CHECK (kind IN ('email', 'link')),
    token_hash CHAR(64) NOT NULL UNIQUE,
    role TEXT NOT NULL,
    target_email TEXT,
    expires_at TIMESTAMPTZ NOT NULL,
    max_uses INTEGER NOT NULL CHECK (max_uses >= 1),
    use_count INTEGER NOT NULL DEFAULT 0 CHECK (use_count <= max_uses),
    created_by UUID NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    revoked_at TIMESTAMPTZ,
    last_accepted_at TIMESTAMPTZ,
    CHECK ((kind = 'email') = (target_email IS NOT NULL))
);

CREATE INDEX IF NOT EXISTS idx_team_invites_team ON team_invites (team_id, created_at DESC);

CREATE TABLE IF NOT EXISTS audit_events (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    timestamp TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    team_id UUID NOT NULL,
    actor_id UUID NOT NULL,
    actor_role TEXT NOT NULL,
    action TEXT NOT NULL,
    target_type TEXT NOT NULL,
    target_id TEXT NOT NULL,
    summary TEXT NOT NULL,
    metadata JSONB
);

CREATE INDEX IF NOT EXISTS idx_audit_events_team ON audit_events (team_id, timestamp DESC);

CREATE TABLE IF NOT EXISTS integration_configs (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    team_id UUID NOT NULL,
    key TEXT NOT NULL,
    enabled BOOLEAN NOT NULL,
    config_version INTEGER NOT NULL CHECK (config_version >= 1),
    updated_by UUID NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (team_id, key)
);
"""
