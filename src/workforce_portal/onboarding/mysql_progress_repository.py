from __future__ import annotations

import json
from typing import Optional

from ..common.datetime_utils import from_naive_utc
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, load_json
from .model import OnboardingProgress, merge_steps
from .repository import OnboardingProgressRepository


class MySQLOnboardingProgressRepository(OnboardingProgressRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, user_id: int) -> Optional[OnboardingProgress]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, company_id, current_step, completed_steps, form_data, updated_at
                FROM onboarding_progress WHERE user_id=%s
                """,
                (user_id,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return OnboardingProgress(
                user_id=int(row["user_id"]),
                company_id=int(row["company_id"]) if row.get("company_id") is not None else None,
                current_step=int(row["current_step"]),
                completed_steps=merge_steps(load_json(row.get("completed_steps"), [])),
                form_data=load_json(row.get("form_data"), {}),
                last_saved_at=from_naive_utc(row.get("updated_at")),
            )

    def upsert(self, progress: OnboardingProgress) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO onboarding_progress(user_id, company_id, current_step, completed_steps, form_data)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    company_id=VALUES(company_id),
                    current_step=VALUES(current_step),
                    completed_steps=VALUES(completed_steps),
                    form_data=VALUES(form_data)
                """,
                (
                    progress.user_id,
                    progress.company_id,
                    progress.current_step,
                    json.dumps(list(progress.completed_steps)),
                    json.dumps(progress.form_data),
                ),
            )

    def delete(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM onboarding_progress WHERE user_id=%s", (user_id,))
            return cur.rowcount > 0
