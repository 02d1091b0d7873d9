import asyncio
import logging

from typing import Awaitable, Set

from app.agent import AgentManager
from app.services.job_ledger import JobLedger
from app.services.stream_broker import EventStreamBroker

logger = logging.getLogger(__name__)

# Process-wide job state, created during startup
_job_ledger: JobLedger | None = None
_stream_broker: EventStreamBroker | None = None
_agent_manager: AgentManager | None = None
_background_tasks: Set[asyncio.Task] = set()


def init_runtime(agent_manager: AgentManager | None = None) -> None:
    global _job_ledger, _stream_broker, _agent_manager
    _job_ledger = JobLedger()
    _stream_broker = EventStreamBroker(_job_ledger)
    _agent_manager = agent_manager or AgentManager()
    logger.info("Job ledger and stream broker ready")


async def close_runtime() -> None:
    global _job_ledger, _stream_broker, _agent_manager
    for task in list(_background_tasks):
        task.cancel()
    if _background_tasks:
        await asyncio.gather(*_background_tasks, return_exceptions=True)
    if _stream_broker is not None:
        _stream_broker.close_all()
    if _job_ledger is not None:
        _job_ledger.clear()
    _job_ledger = None
    _stream_broker = None
    _agent_manager = None


def spawn_background(coro: Awaitable[None]) -> asyncio.Task:
    """Run `coro` detached from the request, keeping a reference until it finishes."""
    task = asyncio.create_task(coro)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


def get_job_ledger() -> JobLedger:
    if _job_ledger is None:
        init_runtime()
    return _job_ledger


def get_stream_broker() -> EventStreamBroker:
    if _stream_broker is None:
        init_runtime()
    return _stream_broker


def get_agent_manager() -> AgentManager:
    if _agent_manager is None:
        init_runtime()
    return _agent_manager
