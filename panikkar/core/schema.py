"""SQLite schema for the job verification workflow (code-first)."""

import logging

from panikkar.core import db_client


logger = logging.getLogger(__name__)


TABLE_SCHEMAS: dict[str, str] = {
    "job_workers": """CREATE TABLE IF NOT EXISTS job_workers (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now')),
        name TEXT NOT NULL,
        latitude REAL,
        longitude REAL,
        rating REAL NOT NULL DEFAULT 0,
        rating_count INTEGER NOT NULL DEFAULT 0,
        jobs_completed INTEGER NOT NULL DEFAULT 0,
        total_earnings REAL NOT NULL DEFAULT 0,
        is_verified INTEGER NOT NULL DEFAULT 0,
        last_active_at TEXT
    )""",
    "job_posts": """CREATE TABLE IF NOT EXISTS job_posts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now')),
        title TEXT NOT NULL,
        poster_user_id INTEGER NOT NULL,
        category TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'open'
            CHECK (status IN ('open', 'assigned', 'in_progress', 'completed', 'cancelled', 'expired')),
        pay_amount REAL NOT NULL DEFAULT 0,
        latitude REAL,
        longitude REAL,
        assigned_worker_id INTEGER REFERENCES job_workers(id),
        applications_count INTEGER NOT NULL DEFAULT 0,
        assigned_at TEXT,
        started_at TEXT,
        completed_at TEXT
    )""",
    "job_applications": """CREATE TABLE IF NOT EXISTS job_applications (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now')),
        job_post_id INTEGER NOT NULL REFERENCES job_posts(id),
        worker_id INTEGER NOT NULL REFERENCES job_workers(id),
        message TEXT NOT NULL DEFAULT '',
        proposed_amount REAL,
        status TEXT NOT NULL DEFAULT 'pending'
            CHECK (status IN ('pending', 'accepted', 'rejected', 'withdrawn')),
        distance_km REAL,
        applied_at TEXT NOT NULL,
        responded_at TEXT,
        UNIQUE(job_post_id, worker_id)
    )""",
    "job_verifications": """CREATE TABLE IF NOT EXISTS job_verifications (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now')),
        job_post_id INTEGER NOT NULL UNIQUE REFERENCES job_posts(id),
        worker_id INTEGER NOT NULL REFERENCES job_workers(id),
        arrival_photo_url TEXT,
        arrival_verified_at TEXT,
        arrival_latitude REAL,
        arrival_longitude REAL,
        arrival_confirmed_at TEXT,
        completion_photo_url TEXT,
        completion_verified_at TEXT,
        handover_worker_confirmed_at TEXT,
        handover_poster_confirmed_at TEXT,
        worker_confirmed_at TEXT,
        poster_confirmed_at TEXT,
        payment_method TEXT CHECK (payment_method IS NULL OR payment_method IN ('cash', 'upi', 'other')),
        payment_confirmed_at TEXT,
        payment_reference TEXT,
        rating INTEGER CHECK (rating IS NULL OR rating BETWEEN 1 AND 5),
        rating_comment TEXT,
        rated_at TEXT,
        worker_rating INTEGER CHECK (worker_rating IS NULL OR worker_rating BETWEEN 1 AND 5),
        worker_feedback TEXT,
        has_dispute INTEGER NOT NULL DEFAULT 0,
        dispute_reason TEXT,
        disputed_at TEXT,
        dispute_resolution TEXT,
        resolved_at TEXT
    )""",
    "worker_badges": """CREATE TABLE IF NOT EXISTS worker_badges (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now')),
        worker_id INTEGER NOT NULL REFERENCES job_workers(id),
        badge_type TEXT NOT NULL,
        badge_name TEXT NOT NULL,
        badge_icon TEXT NOT NULL,
        achievement_data TEXT,
        earned_at TEXT NOT NULL,
        UNIQUE(worker_id, badge_type)
    )""",
    "worker_earnings": """CREATE TABLE IF NOT EXISTS worker_earnings (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now')),
        worker_id INTEGER NOT NULL REFERENCES job_workers(id),
        job_post_id INTEGER NOT NULL REFERENCES job_posts(id),
        amount REAL NOT NULL,
        week_start TEXT NOT NULL,
        earned_at TEXT NOT NULL,
        UNIQUE(worker_id, job_post_id)
    )""",
}

# Mirrors the UNIQUE clauses above; the in-memory test client enforces the same keys
UNIQUE_CONSTRAINTS: dict[str, list[tuple[str, ...]]] = {
    "job_applications": [("job_post_id", "worker_id")],
    "job_verifications": [("job_post_id",)],
    "worker_badges": [("worker_id", "badge_type")],
    "worker_earnings": [("worker_id", "job_post_id")],
}

INDEXES: list[str] = [
    "CREATE INDEX IF NOT EXISTS idx_job_posts_status ON job_posts (status)",
    "CREATE INDEX IF NOT EXISTS idx_job_posts_poster_user_id ON job_posts (poster_user_id)",
    "CREATE INDEX IF NOT EXISTS idx_job_applications_status ON job_applications (status)",
    "CREATE INDEX IF NOT EXISTS idx_job_applications_worker_id ON job_applications (worker_id)",
    "CREATE INDEX IF NOT EXISTS idx_job_verifications_worker_id ON job_verifications (worker_id)",
    "CREATE INDEX IF NOT EXISTS idx_worker_earnings_week ON worker_earnings (worker_id, week_start)",
]


async def init_db(*, db_path: str | None = None) -> None:
    """Create all tables and indexes if they do not exist yet."""
    conn = await db_client.get_connection(db_path=db_path)

    for table_name, ddl in TABLE_SCHEMAS.items():
        await conn.execute(ddl)
        logger.debug("Ensured table exists", extra={"table": table_name})

    for index_sql in INDEXES:
        await conn.execute(index_sql)

    await conn.commit()
    logger.info("Database schema initialized", extra={"tables": len(TABLE_SCHEMAS)})
