import os
import re
import logging
import tempfile

import httpx
from bs4 import BeautifulSoup
from markitdown import MarkItDown
from pydantic import BaseModel
from typing import Literal

from app.core import settings
from .exceptions import ExtractionError

logger = logging.getLogger(__name__)


class TextSource(BaseModel):
    """A job description or resume source: a web page or a PDF on disk."""

    kind: Literal["url", "pdf_path"]
    location: str


def strip_html(html: str) -> str:
    """Drop script/style blocks, strip the remaining tags and collapse whitespace."""
    if not html or not isinstance(html, str):
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(["script", "style"]):
        tag.decompose()
    text = soup.get_text(" ")
    return re.sub(r"\s+", " ", text).strip()


class TextExtractor:
    """
    Normalizes a URL or PDF source into plain text.

    URLs are fetched with a bounded timeout and a fixed user agent; PDFs are
    converted page by page with MarkItDown (pages joined by newlines). Text
    shorter than `min_length` raises `ExtractionError` unless the caller opts
    out with `enforce_min_length=False`, in which case it is only logged.
    """

    def __init__(
        self,
        timeout: float = settings.FETCH_TIMEOUT_SECONDS,
        user_agent: str = settings.FETCH_USER_AGENT,
        min_length: int = settings.MIN_EXTRACTED_TEXT_LENGTH,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.user_agent = user_agent
        self.min_length = min_length
        self.transport = transport
        self.md = MarkItDown(enable_plugins=False)

    async def extract(self, source: TextSource, enforce_min_length: bool = True) -> str:
        if source.kind == "url":
            text = await self._extract_url(source.location)
        elif source.kind == "pdf_path":
            text = self._extract_pdf(source.location)
        else:
            raise ExtractionError(f"Unknown source type: {source.kind}", source=source.location)

        if not text or len(text) < self.min_length:
            message = f"Extracted text content is too short (length: {len(text or '')})."
            if enforce_min_length:
                raise ExtractionError(message, source=source.location)
            logger.warning(f"{message} Source: {source.location}")
        return text

    async def extract_pdf_bytes(self, file_bytes: bytes, enforce_min_length: bool = True) -> str:
        """Write uploaded bytes to a temp file, extract, and always remove the file."""
        with tempfile.NamedTemporaryFile(delete=False, suffix=".pdf") as temp_file:
            temp_file.write(file_bytes)
            temp_path = temp_file.name
        try:
            return await self.extract(
                TextSource(kind="pdf_path", location=temp_path),
                enforce_min_length=enforce_min_length,
            )
        finally:
            if os.path.exists(temp_path):
                os.remove(temp_path)

    async def _extract_url(self, url: str) -> str:
        logger.info(f"Fetching URL: {url}")
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        # InvalidURL is not an HTTPError subclass
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ExtractionError(f"Failed to fetch URL ({e})", source=url) from e

        text = strip_html(response.text)
        logger.info(f"Fetched and stripped HTML for {url}. Text length: {len(text)}")
        return text

    def _extract_pdf(self, path: str) -> str:
        if not os.path.exists(path):
            raise ExtractionError(f"PDF file not found at {path}", source=path)
        try:
            result = self.md.convert(path)
        except Exception as e:
            raise ExtractionError(f"Failed to parse PDF ({e})", source=path) from e

        # pdfminer separates pages with form feeds
        pages = (result.text_content or "").split("\f")
        text = "\n".join(page.strip() for page in pages if page.strip())
        logger.info(f"Parsed PDF {path}. Text length: {len(text)}")
        return text
