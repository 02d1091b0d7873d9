import pytest

from app.services import (
    DocumentMaterializer,
    EnhancementJob,
    JobNotFoundError,
    JobNotReadyError,
    JobStatus,
    UpstreamFailureError,
    apply_selections,
    layout_resume,
)

POINTS = [
    "Built the ingestion service for partner data",
    "Reduced AWS spend by moving batch jobs to spot instances",
]


@pytest.fixture
def materializer(ledger):
    return DocumentMaterializer(ledger)


@pytest.fixture
def finished_job(ledger, resume_factory):
    job = ledger.create(
        EnhancementJob(job_id="job-1", structured_resume=resume_factory(list(POINTS)), pending_points=list(POINTS))
    )
    ledger.set_status("job-1", JobStatus.PROCESSING)
    ledger.set_status("job-1", JobStatus.DONE)
    return job


def bullet_lines(layout):
    return [line[2:] for line in layout.lines() if line.startswith("- ")]


class TestApplySelections:
    def test_replaces_matches_and_keeps_the_rest(self, resume_factory):
        resume = resume_factory(list(POINTS))
        final = apply_selections(resume, {POINTS[0]: "Engineered a partner ingestion service", "unknown": "x"})

        assert final.experience[0].accomplishments == ["Engineered a partner ingestion service", POINTS[1]]
        assert resume.experience[0].accomplishments == POINTS

    def test_empty_choice_keeps_original(self, resume_factory):
        final = apply_selections(resume_factory(list(POINTS)), {POINTS[0]: "", POINTS[1]: None})
        assert final.experience[0].accomplishments == POINTS


class TestLayout:
    def test_sections_in_order(self, resume_factory):
        lines = layout_resume(resume_factory(list(POINTS))).lines()
        assert lines[0] == "Jane Doe"
        assert lines[1] == "555-0100 | jane@example.com | Austin, TX"
        headings = [line for line in lines if line in ("Summary", "Experience", "Education", "Skills")]
        assert headings == ["Summary", "Experience", "Education", "Skills"]
        assert "Acme Corp | Remote | 2020 - Present" in lines
        assert "BSc Computer Science | 2016" in lines
        assert "Python, Go" in lines

    def test_flat_skill_list(self, resume_factory):
        lines = layout_resume(resume_factory([], skills=["SQL", "Airflow"])).lines()
        assert lines[-1] == "SQL, Airflow"

    def test_non_ascii_is_replaced(self, resume_factory):
        lines = layout_resume(resume_factory(["Cut latency by 40% → 120ms"])).lines()
        assert "- Cut latency by 40% ? 120ms" in lines

    def test_long_text_wraps_within_margins(self, resume_factory):
        long_point = " ".join(["streamlined"] * 60)
        layout = layout_resume(resume_factory([long_point]))
        wrapped = [op for op in layout.ops if "streamlined" in op.text]
        assert len(wrapped) > 1
        assert " ".join(op.text for op in wrapped).lstrip("- ") == long_point

    def test_many_points_flow_to_new_pages(self, resume_factory):
        points = [f"Delivered migration project number {i} ahead of schedule" for i in range(80)]
        layout = layout_resume(resume_factory(points))
        assert layout.page_count > 1
        assert bullet_lines(layout) == points
        assert all(op.y >= 50 for op in layout.ops)


class TestMaterialize:
    def test_empty_selections_render_original_text(self, materializer, finished_job):
        pdf_bytes = materializer.materialize("job-1", {})
        assert pdf_bytes.startswith(b"%PDF")
        assert bullet_lines(layout_resume(finished_job.structured_resume)) == POINTS

    def test_output_is_deterministic(self, materializer, finished_job):
        first = materializer.materialize("job-1", {POINTS[0]: "Engineered a partner ingestion service"})
        second = materializer.materialize("job-1", {POINTS[0]: "Engineered a partner ingestion service"})
        assert first == second

    def test_stored_resume_is_not_modified(self, materializer, finished_job):
        materializer.materialize("job-1", {POINTS[0]: "Engineered a partner ingestion service"})
        assert finished_job.structured_resume.experience[0].accomplishments == POINTS

    def test_unknown_job(self, materializer):
        with pytest.raises(JobNotFoundError):
            materializer.materialize("missing", {})

    @pytest.mark.parametrize("status", [JobStatus.PENDING, JobStatus.PROCESSING])
    def test_running_job_is_not_ready(self, materializer, ledger, resume_factory, status):
        ledger.create(EnhancementJob(job_id="job-2", structured_resume=resume_factory(list(POINTS))))
        if status == JobStatus.PROCESSING:
            ledger.set_status("job-2", JobStatus.PROCESSING)
        with pytest.raises(JobNotReadyError):
            materializer.materialize("job-2", {})

    def test_failed_job_surfaces_error(self, materializer, ledger, resume_factory):
        ledger.create(EnhancementJob(job_id="job-3", structured_resume=resume_factory(list(POINTS))))
        ledger.set_status("job-3", JobStatus.PROCESSING)
        ledger.set_status("job-3", JobStatus.ERROR, "loop exploded")
        with pytest.raises(UpstreamFailureError, match="the initial analysis failed: loop exploded"):
            materializer.materialize("job-3", {})

    def test_aborted_job_can_render(self, materializer, ledger, resume_factory):
        ledger.create(EnhancementJob(job_id="job-4", structured_resume=resume_factory(list(POINTS))))
        ledger.set_status("job-4", JobStatus.PROCESSING)
        ledger.set_status("job-4", JobStatus.ABORTED)
        assert materializer.materialize("job-4", {}).startswith(b"%PDF")
