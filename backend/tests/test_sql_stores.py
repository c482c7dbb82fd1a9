"""SQL collaborator tests.

Most run against the configured Postgres database; the failure-path tests
use stub sessions.
"""

from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from stepform.engine.errors import PersistenceError, SubmissionCompletedError
from stepform.engine.runtime import RunnerState, WizardRunner
from stepform.middleware.exceptions import (
    DuplicateResourceError,
    ResourceNotFoundError,
    TemplateIntegrityError,
)
from stepform.schemas.submission import SubmissionStatus
from stepform.schemas.wizard import TemplateCreate, TemplateStatus
from stepform.seeds import NEW_CLIENT_INTAKE
from stepform.services import template_store
from stepform.services.submission_store import SqlSubmissionStore
from stepform.services.template_store import SqlTemplateRepository

from fakes import make_field, make_step, make_submission, make_template


@pytest.mark.integration
@pytest.mark.asyncio
class TestSqlTemplateRepository:
    async def test_create_and_hydrate_in_order(self, db_session):
        repo = SqlTemplateRepository(db_session)
        created = await repo.create_template(NEW_CLIENT_INTAKE)

        loaded = await repo.get_template(created.id)

        assert loaded.slug == "new-client-intake"
        assert [s.title for s in loaded.steps] == [s.title for s in NEW_CLIENT_INTAKE.steps]
        assert [f.name for f in loaded.steps[1].fields] == [f.name for f in NEW_CLIENT_INTAKE.steps[1].fields]
        assert loaded.steps[3].condition.field_id == "wants_quote"

    async def test_duplicate_slug(self, db_session):
        repo = SqlTemplateRepository(db_session)
        await repo.create_template(NEW_CLIENT_INTAKE)
        with pytest.raises(DuplicateResourceError):
            await repo.create_template(NEW_CLIENT_INTAKE)

    async def test_publish_runs_integrity_check(self, db_session):
        repo = SqlTemplateRepository(db_session)
        broken = await repo.create_template(
            TemplateCreate.model_validate({
                "name": "Broken",
                "steps": [{"title": "One", "fields": [{"label": "Pick", "name": "pick", "type": "SELECT"}]}],
            })
        )
        with pytest.raises(TemplateIntegrityError):
            await repo.set_status(broken.id, TemplateStatus.PUBLISHED)

        good = await repo.create_template(NEW_CLIENT_INTAKE)
        published = await repo.set_status(good.id, TemplateStatus.PUBLISHED)
        assert published.status == TemplateStatus.PUBLISHED

    async def test_list_and_duplicate(self, db_session):
        repo = SqlTemplateRepository(db_session)
        original = await repo.create_template(NEW_CLIENT_INTAKE)
        copy = await repo.duplicate(original.id)

        items, total = await repo.list_templates(search="intake")

        assert total == 2
        assert copy.name == "New Client Intake (copy)"
        assert {i.step_count for i in items} == {len(NEW_CLIENT_INTAKE.steps)}

    async def test_missing_template(self, db_session):
        with pytest.raises(ResourceNotFoundError):
            await SqlTemplateRepository(db_session).get_template("missing")


@pytest.mark.integration
@pytest.mark.asyncio
class TestSqlSubmissionStore:
    async def _submission(self, db_session):
        template = await SqlTemplateRepository(db_session).create_template(NEW_CLIENT_INTAKE)
        store = SqlSubmissionStore(db_session)
        return store, await store.create_submission(template.id, submitter_name="Ada")

    async def test_save_replaces_answers(self, db_session):
        store, submission = await self._submission(db_session)

        await store.save_progress(submission.id, 1, {"company_name": "Acme", "industry": "retail"})
        await store.save_progress(submission.id, 2, {"company_name": "Acme"})

        loaded = await store.load_submission(submission.id)
        assert loaded.current_step == 2
        assert loaded.answers == {"company_name": "Acme"}

    async def test_identical_save_is_idempotent(self, db_session):
        store, submission = await self._submission(db_session)

        await store.save_progress(submission.id, 1, {"company_name": "Acme"})
        once = await store.load_submission(submission.id)
        await store.save_progress(submission.id, 1, {"company_name": "Acme"})
        twice = await store.load_submission(submission.id)

        assert twice == once

    async def test_completion_is_terminal(self, db_session):
        store, submission = await self._submission(db_session)

        await store.mark_completed(submission.id, 4, {"company_name": "Acme"})

        loaded = await store.load_submission(submission.id)
        assert loaded.status == SubmissionStatus.COMPLETED
        assert loaded.completed_at is not None
        with pytest.raises(SubmissionCompletedError):
            await store.save_progress(submission.id, 0, {})
        with pytest.raises(SubmissionCompletedError):
            await store.mark_completed(submission.id, 0, {})

    async def test_list_by_status(self, db_session):
        store, submission = await self._submission(db_session)
        await store.mark_completed(submission.id, 0, {})

        items, total = await store.list_submissions(status=SubmissionStatus.COMPLETED)

        assert total == 1
        assert items[0].id == submission.id


# ── Failure paths (no database needed) ──────────────────────────

class DroppedConnectionSession:
    """Session whose queries fail as if the connection dropped."""

    def __init__(self):
        self.rolled_back = False

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, ConnectionError("connection lost"))

    async def rollback(self):
        self.rolled_back = True


class RecordingSession:
    def __init__(self):
        self.events: list[str] = []

    async def commit(self):
        self.events.append("commit")


@pytest.mark.unit
@pytest.mark.asyncio
class TestStoreFailures:
    async def test_failed_lookup_is_a_persistence_error(self):
        session = DroppedConnectionSession()
        store = SqlSubmissionStore(session)

        with pytest.raises(PersistenceError) as exc_info:
            await store.save_progress("sub-1", 1, {"company_name": "Acme"})

        assert exc_info.value.submission_id == "sub-1"
        assert session.rolled_back is True
        with pytest.raises(PersistenceError):
            await store.mark_completed("sub-1", 1, {})
        with pytest.raises(PersistenceError):
            await store.load_submission("sub-1")

    async def test_runner_stays_answering_when_lookup_fails(self):
        template = make_template(make_step("One", make_field("a")), allow_save_progress=False)
        submission = make_submission(template)
        runner = WizardRunner(template, submission, SqlSubmissionStore(DroppedConnectionSession()))

        with pytest.raises(PersistenceError):
            await runner.go_next()

        assert runner.state == RunnerState.ANSWERING

    async def test_status_change_is_committed_before_cache_invalidation(self, monkeypatch):
        template = make_template(make_step("One", make_field("a")))
        row = SimpleNamespace(**dict(template))
        session = RecordingSession()

        async def fetch_row(db, template_id):
            return row

        async def invalidate(pattern):
            session.events.append(f"invalidate {pattern}")
            return 1

        monkeypatch.setattr(template_store, "_fetch_template_row", fetch_row)
        monkeypatch.setattr(template_store, "invalidate_cache", invalidate)

        archived = await SqlTemplateRepository(session).set_status(template.id, TemplateStatus.ARCHIVED)

        assert session.events == ["commit", "invalidate wizard_template:*"]
        assert archived.status == TemplateStatus.ARCHIVED
