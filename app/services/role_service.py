import os
import uuid
import logging

from datetime import datetime
from typing import Any, Dict, List, Tuple

from fastapi.concurrency import run_in_threadpool

from app.agent import AgentManager, GatewayBlockedError, GatewayEmptyError, ProviderError
from app.core import settings, JsonDataStore
from app.models import JdStatus, JdType, JobDescription, Role
from app.prompt import prompt_factory
from .exceptions import (
    ExtractionError,
    JobDescriptionNotFoundError,
    JobDescriptionNotReadyError,
    RoleNotFoundError,
)
from .extraction_service import TextExtractor, TextSource

logger = logging.getLogger(__name__)

MIN_KEYWORD_LENGTH = 2


def parse_keywords(text: str) -> List[str]:
    return [k.strip() for k in text.split(",") if len(k.strip()) >= MIN_KEYWORD_LENGTH]


class RoleService:
    """
    Roles and their job descriptions, stored in the JSON data store.

    Every read-modify-write holds the store lock so concurrent requests and
    background analyses do not overwrite each other's changes.
    """

    def __init__(
        self,
        db: JsonDataStore,
        agent_manager: AgentManager | None = None,
        extractor: TextExtractor | None = None,
        upload_dir: str | None = None,
    ):
        self.db = db
        self.agent_manager = agent_manager
        self.extractor = extractor
        self.upload_dir = upload_dir or settings.JD_UPLOAD_DIR

    # --- roles ---

    async def create_role(self, name: str) -> Role:
        if not name or not name.strip():
            raise ValueError("Role name is required.")
        role = Role(id=str(uuid.uuid4()), name=name.strip())
        async with self.db.lock:
            data = await self.db.read()
            data["roles"][role.id] = role.to_record()
            await self.db.write(data)
        logger.info(f"Created role: {role.name} (ID: {role.id})")
        return role

    async def list_roles(self) -> List[Role]:
        data = await self.db.read()
        return [Role.model_validate(record) for record in data["roles"].values()]

    async def get_role(self, role_id: str) -> Role:
        data = await self.db.read()
        return self._role_from(data, role_id)

    async def delete_role(self, role_id: str) -> None:
        async with self.db.lock:
            data = await self.db.read()
            role = self._role_from(data, role_id)
            for jd_id in role.jd_ids:
                record = data["jds"].pop(jd_id, None)
                if record is None:
                    logger.warning(f"JD {jd_id} listed in role {role_id} was not found during deletion.")
                    continue
                await self._remove_stored_pdf(JobDescription.model_validate(record))
            del data["roles"][role_id]
            await self.db.write(data)
        logger.info(f"Deleted role {role_id} and {len(role.jd_ids)} associated JDs")

    # --- job descriptions ---

    async def add_jd_url(self, role_id: str, url: str) -> JobDescription:
        if not url or not url.startswith("http"):
            raise ValueError("Valid URL is required.")
        jd = JobDescription(id=str(uuid.uuid4()), role_id=role_id, type=JdType.URL, source=url.strip())
        await self._attach_jd(role_id, jd)
        logger.info(f"Added JD URL {jd.source!r} to role {role_id} (JD ID: {jd.id})")
        return jd

    async def add_jd_pdf(self, role_id: str, file_bytes: bytes, original_filename: str | None) -> JobDescription:
        jd_id = str(uuid.uuid4())
        jd = JobDescription(
            id=jd_id,
            role_id=role_id,
            type=JdType.PDF,
            source=f"{jd_id}.pdf",
            original_filename=original_filename,
        )
        path = os.path.join(self.upload_dir, jd.source)
        async with self.db.lock:
            data = await self.db.read()
            self._role_from(data, role_id)
            await run_in_threadpool(self._write_file, path, file_bytes)
            try:
                self._link_jd(data, role_id, jd)
                await self.db.write(data)
            except Exception:
                await run_in_threadpool(self._delete_file, path)
                raise
        logger.info(f"Added JD PDF {original_filename!r} to role {role_id} (JD ID: {jd_id}, saved as {jd.source})")
        return jd

    async def list_role_jds(self, role_id: str) -> List[JobDescription]:
        data = await self.db.read()
        self._role_from(data, role_id)
        return [
            JobDescription.model_validate(record)
            for record in data["jds"].values()
            if record.get("roleId") == role_id
        ]

    async def list_completed_jds(self) -> List[Dict[str, Any]]:
        data = await self.db.read()
        completed = []
        for record in data["jds"].values():
            jd = JobDescription.model_validate(record)
            if jd.status != JdStatus.COMPLETED:
                continue
            role = data["roles"].get(jd.role_id) or {}
            completed.append(
                {
                    "id": jd.id,
                    "roleId": jd.role_id,
                    "roleName": role.get("name") or "Unknown Role",
                    "type": jd.type.value,
                    "source": jd.source,
                    "originalFilename": jd.original_filename,
                    "createdAt": record.get("createdAt"),
                    "analyzedAt": record.get("analyzedAt"),
                }
            )
        logger.info(f"Found {len(completed)} completed JDs.")
        return completed

    async def get_jd(self, jd_id: str) -> JobDescription:
        data = await self.db.read()
        return self._jd_from(data, jd_id)

    async def delete_jd(self, jd_id: str) -> None:
        async with self.db.lock:
            data = await self.db.read()
            jd = self._jd_from(data, jd_id)
            role = data["roles"].get(jd.role_id)
            if role is not None:
                role["jdIds"] = [i for i in role.get("jdIds", []) if i != jd_id]
            else:
                logger.warning(f"Could not find role {jd.role_id} when deleting JD {jd_id}.")
            await self._remove_stored_pdf(jd)
            del data["jds"][jd_id]
            await self.db.write(data)
        logger.info(f"Deleted JD {jd_id}")

    # --- keywords ---

    async def keyword_summary(self, role_id: str) -> Dict[str, Any]:
        data = await self.db.read()
        role = self._role_from(data, role_id)
        counts: Dict[str, int] = {}
        completed_count = 0
        for jd in self._completed_jds(data, role):
            completed_count += 1
            for keyword in jd.keywords:
                normalized = keyword.lower().strip()
                if normalized:
                    counts[normalized] = counts.get(normalized, 0) + 1

        ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return {
            "roleId": role_id,
            "roleName": role.name,
            "completedJdCount": completed_count,
            "keywordsSummary": [{"keyword": k, "count": c} for k, c in ordered],
        }

    async def aggregate_role_keywords(self, role_id: str) -> Tuple[Role, List[str]]:
        """Unique lower-cased keywords of a role's completed JDs, in first-seen order."""
        data = await self.db.read()
        role = self._role_from(data, role_id)
        keywords: Dict[str, None] = {}
        for jd in self._completed_jds(data, role):
            for keyword in jd.keywords:
                normalized = keyword.lower().strip()
                if normalized:
                    keywords.setdefault(normalized, None)
        logger.info(f"Aggregated {len(keywords)} unique keywords for role {role_id}.")
        return role, list(keywords)

    async def require_completed_jd(self, jd_id: str) -> JobDescription:
        jd = await self.get_jd(jd_id)
        if jd.status != JdStatus.COMPLETED:
            raise JobDescriptionNotReadyError(
                jd_id,
                f"Target JD ({jd.display_name}) has not been analyzed yet (status: {jd.status.value}).",
            )
        return jd

    # --- analysis ---

    async def start_analysis(self, jd_id: str) -> Tuple[bool, JobDescription]:
        """
        Mark a JD as `processing`. Returns (False, jd) without changes when it
        is already processing or completed; the caller runs `perform_analysis`.
        """
        async with self.db.lock:
            data = await self.db.read()
            jd = self._jd_from(data, jd_id)
            if jd.status in (JdStatus.PROCESSING, JdStatus.COMPLETED):
                logger.info(f"JD {jd_id} is already {jd.status.value}. Skipping analysis.")
                return False, jd
            jd.status = JdStatus.PROCESSING
            jd.error = None
            data["jds"][jd_id] = jd.to_record()
            await self.db.write(data)
        logger.info(f"Starting analysis for JD {jd_id} (type: {jd.type.value}, source: {jd.source})")
        return True, jd

    async def perform_analysis(self, jd_id: str) -> None:
        """Background half of JD analysis. Never raises; failures are stored on the JD."""
        try:
            jd = await self.get_jd(jd_id)
            if jd.status != JdStatus.PROCESSING:
                logger.warning(f"JD {jd_id} is {jd.status.value}, not processing. Aborting analysis.")
                return
            text = await self._extract_jd_text(jd)
            analysis = await self._analyze(jd_id, text)
            keywords = await self._extract_keywords(jd_id, text)
        except (ExtractionError, ProviderError, JobDescriptionNotFoundError, RuntimeError) as e:
            logger.error(f"Analysis failed for JD {jd_id}: {e}")
            await self._mark_failed(jd_id, str(e) or "An unknown error occurred during analysis.")
            return
        except Exception as e:
            logger.exception(f"Unexpected error during analysis of JD {jd_id}: {e}")
            await self._mark_failed(jd_id, str(e) or "An unknown error occurred during analysis.")
            return

        async with self.db.lock:
            data = await self.db.read()
            record = data["jds"].get(jd_id)
            if record is None or record.get("status") != JdStatus.PROCESSING.value:
                logger.warning(f"JD {jd_id} was not processing when saving results. Results not saved.")
                return
            jd = JobDescription.model_validate(record)
            jd.status = JdStatus.COMPLETED
            jd.analysis = analysis
            jd.keywords = keywords
            jd.analyzed_at = datetime.utcnow()
            jd.error = None
            data["jds"][jd_id] = jd.to_record()
            await self.db.write(data)
        logger.info(f"Completed analysis for JD {jd_id} with {len(keywords)} keywords")

    async def _extract_jd_text(self, jd: JobDescription) -> str:
        extractor = self.extractor or TextExtractor()
        if jd.type == JdType.URL:
            source = TextSource(kind="url", location=jd.source)
        else:
            source = TextSource(kind="pdf_path", location=os.path.join(self.upload_dir, jd.source))
        try:
            return await extractor.extract(source)
        except ExtractionError as e:
            raise ExtractionError(f"{e} Analysis aborted.", source=e.source) from e

    async def _analyze(self, jd_id: str, text: str) -> str:
        prompt = prompt_factory.get("jd_analysis").format(text[: settings.MAX_PROMPT_TEXT_CHARS])
        try:
            return await self._agent().run(prompt=prompt)
        except ProviderError as e:
            raise ProviderError(f"Gemini analysis call failed: {e}") from e

    async def _extract_keywords(self, jd_id: str, text: str) -> List[str]:
        prompt = prompt_factory.get("jd_keywords").format(text[: settings.MAX_PROMPT_TEXT_CHARS])
        try:
            keywords_text = await self._agent().run(prompt=prompt)
        except (GatewayBlockedError, GatewayEmptyError) as e:
            logger.warning(f"Keywords request blocked for JD {jd_id}: {e}")
            return []
        except ProviderError as e:
            logger.warning(f"Keyword extraction failed for JD {jd_id}: {e}. Proceeding without keywords.")
            return []
        keywords = parse_keywords(keywords_text)
        logger.info(f"Received {len(keywords)} keywords for JD {jd_id}")
        return keywords

    async def _mark_failed(self, jd_id: str, message: str) -> None:
        async with self.db.lock:
            data = await self.db.read()
            record = data["jds"].get(jd_id)
            if record is None or record.get("status") not in (
                JdStatus.PROCESSING.value,
                JdStatus.PENDING.value,
            ):
                return
            record["status"] = JdStatus.FAILED.value
            record["error"] = message
            await self.db.write(data)
        logger.info(f"Marked JD {jd_id} as failed.")

    # --- helpers ---

    def _agent(self) -> AgentManager:
        if self.agent_manager is None:
            self.agent_manager = AgentManager()
        return self.agent_manager

    async def _attach_jd(self, role_id: str, jd: JobDescription) -> None:
        async with self.db.lock:
            data = await self.db.read()
            self._role_from(data, role_id)
            self._link_jd(data, role_id, jd)
            await self.db.write(data)

    @staticmethod
    def _link_jd(data: Dict[str, Any], role_id: str, jd: JobDescription) -> None:
        data["jds"][jd.id] = jd.to_record()
        data["roles"][role_id].setdefault("jdIds", []).append(jd.id)

    @staticmethod
    def _role_from(data: Dict[str, Any], role_id: str) -> Role:
        record = data["roles"].get(role_id)
        if record is None:
            raise RoleNotFoundError(role_id)
        return Role.model_validate(record)

    @staticmethod
    def _jd_from(data: Dict[str, Any], jd_id: str) -> JobDescription:
        record = data["jds"].get(jd_id)
        if record is None:
            raise JobDescriptionNotFoundError(jd_id)
        return JobDescription.model_validate(record)

    @staticmethod
    def _completed_jds(data: Dict[str, Any], role: Role) -> List[JobDescription]:
        completed = []
        for jd_id in role.jd_ids:
            record = data["jds"].get(jd_id)
            if record is not None and record.get("status") == JdStatus.COMPLETED.value:
                completed.append(JobDescription.model_validate(record))
        return completed

    async def _remove_stored_pdf(self, jd: JobDescription) -> None:
        if jd.type != JdType.PDF or not jd.source:
            return
        path = os.path.join(self.upload_dir, jd.source)
        try:
            await run_in_threadpool(os.remove, path)
            logger.info(f"Deleted PDF file: {path}")
        except OSError as e:
            logger.error(f"Error deleting PDF file {path} for JD {jd.id}: {e}")

    @staticmethod
    def _write_file(path: str, file_bytes: bytes) -> None:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "wb") as fh:
            fh.write(file_bytes)

    @staticmethod
    def _delete_file(path: str) -> None:
        if os.path.exists(path):
            os.remove(path)
