"""Integration tests for the reporting queries."""

import pytest

from newsnexus.core.exceptions import ValidationError
from newsnexus.database.models import ArticleApproval, HumanStateConfirmation
from newsnexus.services.reporting_service import ReportingService


@pytest.fixture
def service(db_session) -> ReportingService:
    return ReportingService(db_session, retry_delay=0)


class TestStateAssignmentListing:
    """list_articles_with_state_assignments"""

    async def test_null_state_filter(self, service, states, make_article, make_proposal):
        with_state = await make_article(url="https://example.com/1", title="Ohio flood")
        without_state = await make_article(url="https://example.com/2", title="Overseas storm")
        await make_proposal(with_state, states["OH"])
        await make_proposal(without_state, None, reasoning="No US location")

        located = await service.list_articles_with_state_assignments()
        unlocated = await service.list_articles_with_state_assignments(include_null_state=True)

        assert [a["id"] for a in located] == [with_state]
        assert located[0]["stateAssignment"]["stateName"] == "Ohio"
        assert located[0]["stateAssignment"]["occuredInTheUS"] is True
        assert [a["id"] for a in unlocated] == [without_state]
        assert unlocated[0]["stateAssignment"]["stateId"] is None
        assert unlocated[0]["stateAssignment"]["stateName"] is None

    async def test_non_boolean_flag_is_rejected(self, service):
        with pytest.raises(ValidationError):
            await service.list_articles_with_state_assignments(include_null_state="yes")

    async def test_missing_flag_lists_located_articles(
        self, service, states, make_article, make_proposal
    ):
        article_id = await make_article()
        await make_proposal(article_id, states["CA"])

        articles = await service.list_articles_with_state_assignments(include_null_state=None)

        assert [a["id"] for a in articles] == [article_id]


class TestReportIsolation:
    """The two reports share only the retry wrapper."""

    async def test_approved_report_skips_listing_validation(self, service, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("listing validation ran for the approved report")

        monkeypatch.setattr(service, "validate", fail)

        assert await service.list_approved_articles_report() == []


class TestApprovedReport:
    """list_approved_articles_report"""

    async def test_only_articles_with_a_true_approval_are_listed(
        self, service, db_session, states, make_article
    ):
        approved = await make_article(url="https://example.com/approved", title="Approved")
        rejected = await make_article(url="https://example.com/rejected", title="Rejected")
        await make_article(url="https://example.com/untouched", title="Untouched")

        db_session.add_all(
            [
                HumanStateConfirmation(article_id=approved, state_id=states["OH"]),
                HumanStateConfirmation(article_id=approved, state_id=states["CA"]),
                HumanStateConfirmation(article_id=rejected, state_id=states["TX"]),
                ArticleApproval(article_id=approved, is_approved=True, km_notes="ok"),
                ArticleApproval(article_id=rejected, is_approved=False),
            ]
        )
        await db_session.commit()

        report = await service.list_approved_articles_report()

        assert [a["id"] for a in report] == [approved]
        entry = report[0]
        assert [s["abbreviation"] for s in entry["States"]] == ["OH", "CA"]
        assert len(entry["ArticleApproveds"]) == 1
        assert entry["ArticleApproveds"][0]["kmNotes"] == "ok"
        assert entry["stateAbbreviation"] == "OH, CA"

    async def test_approved_article_without_states(self, service, db_session, make_article):
        article_id = await make_article()
        db_session.add(ArticleApproval(article_id=article_id, is_approved=True))
        await db_session.commit()

        report = await service.list_approved_articles_report()

        assert report[0]["States"] == []
        assert report[0]["stateAbbreviation"] == ""
