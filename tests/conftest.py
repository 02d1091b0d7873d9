import os
import tempfile

# Keep the role/JD store and uploads out of the working tree.
_TEST_ROOT = tempfile.mkdtemp(prefix="resume-enhancer-tests-")
os.environ.setdefault("DATA_FILE_PATH", os.path.join(_TEST_ROOT, "data.json"))
os.environ.setdefault("JD_UPLOAD_DIR", os.path.join(_TEST_ROOT, "uploads", "jds"))
os.environ.setdefault("STREAM_CONNECT_GRACE_SECONDS", "0")

from typing import Any, Callable, Dict, List, Tuple  # noqa: E402

import pytest  # noqa: E402

from app.agent import AgentManager  # noqa: E402
from app.agent.providers.base import Provider  # noqa: E402
from app.schemas.pydantic import StructuredResumeModel  # noqa: E402
from app.services import EventStreamBroker, JobLedger  # noqa: E402

RELEVANCE_PREFIX = "Is the following resume bullet point relevant"
RELEVANT_SUGGESTION_PREFIX = "Rewrite the following resume bullet point to be more impactful and concise, starting"
GENERAL_SUGGESTION_PREFIX = "Rewrite the following resume bullet point to be more impactful and concise for general"
STRUCTURING_MARKER = "Analyze the following resume text"

Responder = Callable[[str, Dict[str, Any]], Any]


class ScriptedProvider(Provider):
    """
    Stand-in for the Gemini provider. `responder(prompt, options)` returns the
    text to answer with, or an exception instance to raise. Every call is
    recorded in `calls`.
    """

    def __init__(self, responder: Responder):
        self.responder = responder
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def __call__(self, prompt: str, **generation_args: Any) -> str:
        self.calls.append((prompt, generation_args))
        result = self.responder(prompt, generation_args)
        if isinstance(result, Exception):
            raise result
        return result

    def prompts_starting_with(self, prefix: str) -> List[str]:
        return [prompt for prompt, _ in self.calls if prompt.lstrip().startswith(prefix)]


def point_from_prompt(prompt: str) -> str:
    """The quoted bullet at the end of a relevance or suggestion prompt."""
    return prompt.rsplit(': "', 1)[1].rstrip('"')


def default_responder(prompt: str, options: Dict[str, Any]) -> Any:
    if prompt.startswith(RELEVANCE_PREFIX):
        return "yes"
    point = point_from_prompt(prompt)
    return f"- Delivered measurable results by reworking: {point}\n- Drove a second outcome from: {point}"


@pytest.fixture
def make_agent() -> Callable[[Responder], Tuple[AgentManager, ScriptedProvider]]:
    def _make(responder: Responder = default_responder):
        provider = ScriptedProvider(responder)
        return AgentManager(provider=provider), provider

    return _make


@pytest.fixture
def ledger() -> JobLedger:
    return JobLedger()


@pytest.fixture
def broker(ledger: JobLedger) -> EventStreamBroker:
    return EventStreamBroker(ledger)


def build_resume(accomplishments: List[str], **overrides: Any) -> StructuredResumeModel:
    data = {
        "name": "Jane Doe",
        "contactInfo": {
            "phone": "555-0100",
            "email": "jane@example.com",
            "location": "Austin, TX",
            "linkedin": None,
        },
        "summary": "Backend engineer focused on data platforms.",
        "experience": [
            {
                "company": "Acme Corp",
                "location": "Remote",
                "dates": "2020 - Present",
                "title": "Senior Engineer",
                "accomplishments": accomplishments,
            }
        ],
        "education": [{"degree": "BSc Computer Science", "institution": "State University", "date": "2016"}],
        "skills": {"Languages": ["Python", "Go"], "Cloud": ["AWS"]},
    }
    data.update(overrides)
    return StructuredResumeModel.model_validate(data)


@pytest.fixture
def resume_factory() -> Callable[..., StructuredResumeModel]:
    return build_resume
