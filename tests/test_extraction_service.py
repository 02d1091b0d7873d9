import os

import httpx
import pytest

from app.services import ExtractionError, TextExtractor, TextSource, render_resume_pdf, strip_html

JOB_PAGE = """
<html>
  <head>
    <style>body { color: red; }</style>
    <script>var tracking = "should never appear";</script>
  </head>
  <body>
    <h1>Senior Python Engineer</h1>
    <p>Build   data pipelines on AWS.
       Work with product and platform teams to ship reliable services.</p>
  </body>
</html>
"""


def mock_transport(status_code: int = 200, body: str = JOB_PAGE, seen=None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, text=body)

    return httpx.MockTransport(handler)


class TestStripHtml:
    def test_removes_script_and_style_blocks(self):
        text = strip_html(JOB_PAGE)
        assert "tracking" not in text
        assert "color: red" not in text

    def test_collapses_whitespace(self):
        text = strip_html(JOB_PAGE)
        assert "Build data pipelines on AWS." in text
        assert "  " not in text
        assert text == text.strip()

    def test_non_string_input(self):
        assert strip_html("") == ""
        assert strip_html(None) == ""


class TestUrlExtraction:
    @pytest.mark.asyncio
    async def test_fetches_and_strips(self):
        seen = []
        extractor = TextExtractor(transport=mock_transport(seen=seen))
        text = await extractor.extract(TextSource(kind="url", location="https://jobs.example.com/1"))

        assert text.startswith("Senior Python Engineer")
        assert seen[0].headers["User-Agent"] == "Mozilla/5.0"

    @pytest.mark.asyncio
    async def test_http_error_raises_extraction_error(self):
        extractor = TextExtractor(transport=mock_transport(status_code=503))
        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract(TextSource(kind="url", location="https://jobs.example.com/down"))
        assert "Failed to fetch URL" in str(exc_info.value)
        assert exc_info.value.source == "https://jobs.example.com/down"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["http://[::1", "http://exa mple.com/\x00job"])
    async def test_malformed_url_raises_extraction_error(self, url):
        extractor = TextExtractor(transport=mock_transport())
        with pytest.raises(ExtractionError, match="Failed to fetch URL") as exc_info:
            await extractor.extract(TextSource(kind="url", location=url))
        assert exc_info.value.source == url

    @pytest.mark.asyncio
    async def test_short_text_is_rejected(self):
        extractor = TextExtractor(transport=mock_transport(body="<p>Too short</p>"))
        with pytest.raises(ExtractionError, match="too short"):
            await extractor.extract(TextSource(kind="url", location="https://jobs.example.com/2"))

    @pytest.mark.asyncio
    async def test_short_text_allowed_when_not_enforced(self):
        extractor = TextExtractor(transport=mock_transport(body="<p>Too short</p>"))
        text = await extractor.extract(
            TextSource(kind="url", location="https://jobs.example.com/2"),
            enforce_min_length=False,
        )
        assert text == "Too short"


class TestPdfExtraction:
    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        extractor = TextExtractor()
        with pytest.raises(ExtractionError, match="PDF file not found"):
            await extractor.extract(TextSource(kind="pdf_path", location=str(tmp_path / "nope.pdf")))

    @pytest.mark.asyncio
    async def test_reads_rendered_pdf(self, tmp_path, resume_factory):
        resume = resume_factory(["Migrated the billing platform to Kubernetes clusters"])
        path = tmp_path / "resume.pdf"
        path.write_bytes(render_resume_pdf(resume))

        text = await TextExtractor().extract(TextSource(kind="pdf_path", location=str(path)))

        assert "Jane Doe" in text
        assert "Kubernetes" in text

    @pytest.mark.asyncio
    async def test_upload_bytes_leave_no_temp_file(self, monkeypatch, resume_factory):
        created = []
        original = TextExtractor._extract_pdf

        def tracking_extract(self, path):
            created.append(path)
            return original(self, path)

        monkeypatch.setattr(TextExtractor, "_extract_pdf", tracking_extract)
        pdf_bytes = render_resume_pdf(resume_factory(["Led the migration of nightly batch jobs"]))

        text = await TextExtractor().extract_pdf_bytes(pdf_bytes)

        assert "Acme Corp" in text
        assert created and not os.path.exists(created[0])
