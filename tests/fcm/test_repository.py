"""Tests for FcmScheduleRepository."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from toolkit.fcm.repository import FcmScheduleRepository

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


def _insert(repo, *, user="u1", name="standup", next_execution=None, payload=None):
    return repo.insert(
        name=name,
        fb_user_id=user,
        push_token="device-token",
        fb_project_id="demo-project",
        cron_pattern="0 9 * * *",
        payload=payload if payload is not None else {"notification": {"title": "hi"}},
        next_execution=next_execution or NOW + timedelta(days=1),
        now=NOW,
    )


class TestFcmScheduleRepository:
    def test_insert_and_get(self, conn):
        repo = FcmScheduleRepository(conn)
        schedule_id = _insert(repo)
        conn.commit()

        schedule = repo.get(schedule_id)

        assert schedule.name == "standup"
        assert schedule.payload == {"notification": {"title": "hi"}}
        assert schedule.last_execution == "2026-03-02T09:00:00+00:00"
        assert schedule.created_at == schedule.updated_at == schedule.last_execution
        assert schedule.next_execution == "2026-03-03T09:00:00+00:00"

    def test_user_scoping(self, conn):
        repo = FcmScheduleRepository(conn)
        mine = _insert(repo, user="u1")
        theirs = _insert(repo, user="u2")

        assert [s.id for s in repo.list_for_user("u1")] == [mine]
        assert repo.get_for_user(theirs, "u1") is None
        assert repo.delete_for_user(theirs, "u1") == 0
        assert repo.delete_for_user(mine, "u1") == 1
        assert [s.id for s in repo.list_all()] == [theirs]

    def test_update_for_user(self, conn):
        repo = FcmScheduleRepository(conn)
        schedule_id = _insert(repo)
        later = NOW + timedelta(hours=1)

        changed = repo.update_for_user(
            schedule_id,
            "u1",
            name="renamed",
            push_token="new-token",
            cron_pattern="30 9 * * *",
            payload={"data": {"k": "v"}},
            next_execution=later + timedelta(minutes=30),
            now=later,
        )

        schedule = repo.get(schedule_id)
        assert changed == 1
        assert schedule.name == "renamed"
        assert schedule.payload == {"data": {"k": "v"}}
        assert schedule.updated_at == "2026-03-02T10:00:00+00:00"
        assert schedule.created_at == "2026-03-02T09:00:00+00:00"
        assert repo.update_for_user(
            schedule_id,
            "u2",
            name="x",
            push_token="x",
            cron_pattern="* * * * *",
            payload={},
            next_execution=later,
            now=later,
        ) == 0

    def test_list_due_and_mark_executed(self, conn):
        repo = FcmScheduleRepository(conn)
        due = _insert(repo, name="due", next_execution=NOW - timedelta(minutes=1))
        exact = _insert(repo, name="exact", next_execution=NOW)
        _insert(repo, name="later", next_execution=NOW + timedelta(minutes=1))

        assert [s.id for s in repo.list_due(NOW)] == [due, exact]
        assert [s.id for s in repo.list_due(NOW, limit=1)] == [due]

        repo.mark_executed(due, executed_at=NOW, next_execution=NOW + timedelta(days=1))

        schedule = repo.get(due)
        assert schedule.last_execution == "2026-03-02T09:00:00+00:00"
        assert schedule.next_execution == "2026-03-03T09:00:00+00:00"
        assert [s.id for s in repo.list_due(NOW)] == [exact]
