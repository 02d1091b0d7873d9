import os

import httpx
import pytest

from app.agent import GatewayBlockedError, ProviderError
from app.core import JsonDataStore
from app.models import JdStatus, JdType
from app.services import (
    JobDescriptionNotFoundError,
    JobDescriptionNotReadyError,
    RoleNotFoundError,
    RoleService,
    TextExtractor,
)
from app.services.role_service import parse_keywords

JD_HTML = (
    "<html><head><script>var x = 1;</script><style>p {}</style></head>"
    "<body><h1>Senior Data Engineer</h1><p>Build streaming pipelines with Python, Kafka and AWS. "
    "Own data quality and mentor engineers.</p></body></html>"
)

ANALYSIS_PREFIX = "Analyze the following job description"
KEYWORDS_PREFIX = "From the following job description text"


def jd_responder(keywords="Python, Kafka, AWS, a, Data Quality"):
    def respond(prompt, options):
        if prompt.startswith(ANALYSIS_PREFIX):
            return "1. **Job Description:** Data platform role."
        if prompt.startswith(KEYWORDS_PREFIX):
            return keywords
        raise AssertionError(f"unexpected prompt: {prompt[:40]}")

    return respond


def html_transport(status_code=200):
    return httpx.MockTransport(lambda request: httpx.Response(status_code, text=JD_HTML))


@pytest.fixture
def store(tmp_path):
    return JsonDataStore(str(tmp_path / "data.json"))


@pytest.fixture
def make_service(store, tmp_path, make_agent):
    def _make(responder=None, status_code=200):
        agent, provider = make_agent(responder or jd_responder())
        service = RoleService(
            store,
            agent_manager=agent,
            extractor=TextExtractor(transport=html_transport(status_code)),
            upload_dir=str(tmp_path / "uploads"),
        )
        return service, provider

    return _make


async def completed_jd(service, role_id, url="https://jobs.example.com/1"):
    jd = await service.add_jd_url(role_id, url)
    await service.start_analysis(jd.id)
    await service.perform_analysis(jd.id)
    return await service.get_jd(jd.id)


def test_parse_keywords():
    assert parse_keywords(" Python, a ,Kafka ,, AWS ") == ["Python", "Kafka", "AWS"]


class TestRoles:
    @pytest.mark.asyncio
    async def test_create_list_and_get(self, make_service):
        service, _ = make_service()
        role = await service.create_role("  Data Engineer ")
        assert role.name == "Data Engineer"
        assert [r.id for r in await service.list_roles()] == [role.id]
        assert (await service.get_role(role.id)).name == "Data Engineer"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "   ", None])
    async def test_name_is_required(self, make_service, name):
        service, _ = make_service()
        with pytest.raises(ValueError, match="Role name is required."):
            await service.create_role(name)

    @pytest.mark.asyncio
    async def test_unknown_role(self, make_service):
        service, _ = make_service()
        with pytest.raises(RoleNotFoundError):
            await service.get_role("missing")

    @pytest.mark.asyncio
    async def test_delete_cascades_to_jds_and_files(self, make_service, tmp_path):
        service, _ = make_service()
        role = await service.create_role("Data Engineer")
        url_jd = await service.add_jd_url(role.id, "https://jobs.example.com/1")
        pdf_jd = await service.add_jd_pdf(role.id, b"%PDF-1.4 fake", "posting.pdf")
        pdf_path = tmp_path / "uploads" / pdf_jd.source
        assert pdf_path.exists()

        await service.delete_role(role.id)

        assert await service.list_roles() == []
        assert not pdf_path.exists()
        for jd_id in (url_jd.id, pdf_jd.id):
            with pytest.raises(JobDescriptionNotFoundError):
                await service.get_jd(jd_id)


class TestJobDescriptions:
    @pytest.mark.asyncio
    async def test_add_url_links_to_role(self, make_service):
        service, _ = make_service()
        role = await service.create_role("Data Engineer")
        jd = await service.add_jd_url(role.id, "https://jobs.example.com/1")

        assert jd.type == JdType.URL
        assert jd.status == JdStatus.PENDING
        assert (await service.get_role(role.id)).jd_ids == [jd.id]
        assert [j.id for j in await service.list_role_jds(role.id)] == [jd.id]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["", "ftp://jobs.example.com/1", "jobs.example.com"])
    async def test_url_must_be_http(self, make_service, url):
        service, _ = make_service()
        role = await service.create_role("Data Engineer")
        with pytest.raises(ValueError, match="Valid URL is required."):
            await service.add_jd_url(role.id, url)

    @pytest.mark.asyncio
    async def test_add_to_unknown_role(self, make_service, tmp_path):
        service, _ = make_service()
        with pytest.raises(RoleNotFoundError):
            await service.add_jd_url("missing", "https://jobs.example.com/1")
        with pytest.raises(RoleNotFoundError):
            await service.add_jd_pdf("missing", b"%PDF-1.4", "posting.pdf")
        uploads = tmp_path / "uploads"
        assert not uploads.exists() or os.listdir(uploads) == []

    @pytest.mark.asyncio
    async def test_pdf_is_stored_under_its_id(self, make_service, tmp_path):
        service, _ = make_service()
        role = await service.create_role("Data Engineer")
        jd = await service.add_jd_pdf(role.id, b"%PDF-1.4 fake", "posting.pdf")

        assert jd.source == f"{jd.id}.pdf"
        assert jd.display_name == "posting.pdf"
        assert (tmp_path / "uploads" / jd.source).read_bytes() == b"%PDF-1.4 fake"

    @pytest.mark.asyncio
    async def test_delete_jd_unlinks_from_role(self, make_service):
        service, _ = make_service()
        role = await service.create_role("Data Engineer")
        keep = await service.add_jd_url(role.id, "https://jobs.example.com/1")
        drop = await service.add_jd_url(role.id, "https://jobs.example.com/2")

        await service.delete_jd(drop.id)

        assert (await service.get_role(role.id)).jd_ids == [keep.id]
        with pytest.raises(JobDescriptionNotFoundError):
            await service.delete_jd(drop.id)


class TestAnalysis:
    @pytest.mark.asyncio
    async def test_url_analysis_completes(self, make_service):
        service, provider = make_service()
        role = await service.create_role("Data Engineer")

        jd = await completed_jd(service, role.id)

        assert jd.status == JdStatus.COMPLETED
        assert jd.analysis.startswith("1. **Job Description:**")
        assert jd.keywords == ["Python", "Kafka", "AWS", "Data Quality"]
        assert jd.analyzed_at is not None
        analysis_prompt = provider.prompts_starting_with(ANALYSIS_PREFIX)[0]
        assert "Build streaming pipelines" in analysis_prompt
        assert "var x" not in analysis_prompt

    @pytest.mark.asyncio
    async def test_keyword_failure_is_not_fatal(self, make_service):
        service, _ = make_service(jd_responder(keywords=GatewayBlockedError("SAFETY")))
        role = await service.create_role("Data Engineer")

        jd = await completed_jd(service, role.id)

        assert jd.status == JdStatus.COMPLETED
        assert jd.keywords == []

    @pytest.mark.asyncio
    async def test_fetch_failure_marks_failed(self, make_service):
        service, provider = make_service(status_code=503)
        role = await service.create_role("Data Engineer")

        jd = await completed_jd(service, role.id)

        assert jd.status == JdStatus.FAILED
        assert "Analysis aborted." in jd.error
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_malformed_url_marks_failed_and_can_retry(self, make_service):
        service, provider = make_service()
        role = await service.create_role("Data Engineer")

        jd = await completed_jd(service, role.id, url="http://[::1")

        assert jd.status == JdStatus.FAILED
        assert "Failed to fetch URL" in jd.error
        assert provider.calls == []
        started, _ = await service.start_analysis(jd.id)
        assert started is True

    @pytest.mark.asyncio
    async def test_unexpected_error_marks_failed(self, make_service):
        def respond(prompt, options):
            return ValueError("response had no text")

        service, _ = make_service(respond)
        role = await service.create_role("Data Engineer")

        jd = await completed_jd(service, role.id)

        assert jd.status == JdStatus.FAILED
        assert jd.error == "response had no text"

    @pytest.mark.asyncio
    async def test_analysis_call_failure_marks_failed(self, make_service):
        def respond(prompt, options):
            return ProviderError("quota exceeded")

        service, _ = make_service(respond)
        role = await service.create_role("Data Engineer")

        jd = await completed_jd(service, role.id)

        assert jd.status == JdStatus.FAILED
        assert jd.error.startswith("Gemini analysis call failed:")

    @pytest.mark.asyncio
    async def test_start_skips_completed(self, make_service):
        service, provider = make_service()
        role = await service.create_role("Data Engineer")
        jd = await completed_jd(service, role.id)
        calls = len(provider.calls)

        started, current = await service.start_analysis(jd.id)

        assert started is False
        assert current.status == JdStatus.COMPLETED
        await service.perform_analysis(jd.id)
        assert len(provider.calls) == calls

    @pytest.mark.asyncio
    async def test_failed_jd_can_be_retried(self, make_service):
        service, _ = make_service(status_code=503)
        role = await service.create_role("Data Engineer")
        jd = await completed_jd(service, role.id)

        started, current = await service.start_analysis(jd.id)

        assert started is True
        assert current.status == JdStatus.PROCESSING
        assert current.error is None


class TestKeywords:
    @pytest.mark.asyncio
    async def test_summary_and_aggregation(self, make_service, make_agent):
        service, _ = make_service()
        role = await service.create_role("Data Engineer")
        await completed_jd(service, role.id, "https://jobs.example.com/1")
        service.agent_manager, _ = make_agent(jd_responder(keywords="Python, Spark"))
        await completed_jd(service, role.id, "https://jobs.example.com/2")
        await service.add_jd_url(role.id, "https://jobs.example.com/pending")

        summary = await service.keyword_summary(role.id)
        _, keywords = await service.aggregate_role_keywords(role.id)

        assert summary["completedJdCount"] == 2
        assert summary["keywordsSummary"][0] == {"keyword": "python", "count": 2}
        assert keywords == ["python", "kafka", "aws", "data quality", "spark"]

    @pytest.mark.asyncio
    async def test_require_completed_jd(self, make_service):
        service, _ = make_service()
        role = await service.create_role("Data Engineer")
        pending = await service.add_jd_url(role.id, "https://jobs.example.com/1")

        with pytest.raises(JobDescriptionNotReadyError, match=r"has not been analyzed yet \(status: pending\)"):
            await service.require_completed_jd(pending.id)

        done = await completed_jd(service, role.id, "https://jobs.example.com/2")
        assert (await service.require_completed_jd(done.id)).id == done.id

    @pytest.mark.asyncio
    async def test_completed_listing_includes_role_name(self, make_service):
        service, _ = make_service()
        role = await service.create_role("Data Engineer")
        jd = await completed_jd(service, role.id)
        await service.add_jd_url(role.id, "https://jobs.example.com/pending")

        listing = await service.list_completed_jds()

        assert [(item["id"], item["roleName"]) for item in listing] == [(jd.id, "Data Engineer")]

