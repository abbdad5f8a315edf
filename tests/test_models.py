"""
Tests for Pydantic domain models.
"""

from siteforge.domain.models import (
    CreateSiteRequest,
    EditRequest,
    RunState,
    TemplateFile,
    WatchPhase,
    WorkflowStatus,
)


class TestRunState:
    """Tests for RunState enum."""

    def test_values(self):
        assert RunState.NONE.value == "none"
        assert RunState.WORKING.value == "working"
        assert RunState.DONE.value == "done"
        assert RunState.FAILED.value == "failed"

    def test_from_string(self):
        """RunState should be constructible from its wire value."""
        assert RunState("working") == RunState.WORKING


class TestWatchPhase:
    """Tests for WatchPhase enum."""

    def test_values(self):
        assert [p.value for p in WatchPhase] == ["idle", "working", "done", "failed"]


class TestWorkflowStatus:
    """Tests for WorkflowStatus model."""

    def test_defaults_mean_no_run(self):
        """An empty status is the 'none' answer."""
        status = WorkflowStatus()
        assert status.status == "none"
        assert status.conclusion is None
        assert status.state == "none"

    def test_state_serializes_as_string(self):
        status = WorkflowStatus(status="completed", conclusion="success", state=RunState.DONE)
        assert status.model_dump()["state"] == "done"


class TestEditRequest:
    """Tests for EditRequest model."""

    def test_accepts_camel_case_site_id(self):
        """The dashboard sends siteId."""
        request = EditRequest.model_validate({"siteId": "blog-123abc", "prompt": "Blue header"})
        assert request.site_id == "blog-123abc"
        assert request.prompt == "Blue header"

    def test_accepts_field_name(self):
        request = EditRequest(site_id="blog-123abc", prompt="x")
        assert request.site_id == "blog-123abc"

    def test_missing_fields_default_to_empty(self):
        request = EditRequest.model_validate({})
        assert request.site_id == ""
        assert request.prompt == ""


class TestCreateSiteRequest:
    """Tests for CreateSiteRequest model."""

    def test_description_optional(self):
        request = CreateSiteRequest(name="my-site")
        assert request.description is None

    def test_template_file(self):
        file = TemplateFile(path="index.html", content="<html></html>")
        assert file.path == "index.html"
