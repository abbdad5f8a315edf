"""
Tests for the site template bundle and the initial build prompt.
"""

from unittest.mock import patch

from siteforge.core.prompts import (
    DEFAULT_BUILD_MODEL,
    build_initial_prompt,
    extract_urls,
    initial_build_model,
)
from siteforge.core.templates import SITE_NAME_PLACEHOLDER, get_template_files


class TestTemplateFiles:
    """Tests for get_template_files."""

    def test_four_files_in_order(self):
        paths = [f.path for f in get_template_files("cafe")]
        assert paths == [
            "index.html",
            "CLAUDE.md",
            "netlify.toml",
            ".github/workflows/ai-edit.yml",
        ]

    def test_homepage_titled_with_site_name(self):
        index = get_template_files("my-photo-site")[0]
        assert "my-photo-site" in index.content
        assert SITE_NAME_PLACEHOLDER not in index.content

    def test_workflow_takes_prompt_and_model(self):
        workflow = get_template_files("cafe")[3].content
        assert "workflow_dispatch" in workflow
        assert "prompt" in workflow
        assert "model" in workflow
        assert "ANTHROPIC_API_KEY" in workflow

    def test_netlify_publishes_root(self):
        netlify = get_template_files("cafe")[2].content
        assert 'publish = "."' in netlify


class TestInitialPrompt:
    """Tests for the first-build prompt."""

    def test_description_embedded_verbatim(self):
        description = "A photography portfolio with a dark theme"
        prompt = build_initial_prompt("my-photo-site", description)
        assert description in prompt
        assert "my-photo-site" in prompt

    def test_without_urls_no_reference_folder(self):
        prompt = build_initial_prompt("cafe", "A cozy cafe in Lisbon")
        assert "reference/" not in prompt

    def test_with_urls_lists_them(self):
        prompt = build_initial_prompt("cafe", "Rebuild https://old-cafe.example.com please")
        assert "- https://old-cafe.example.com" in prompt
        assert "reference/" in prompt

    def test_extract_urls_dedupes_in_order(self):
        text = "see https://a.example and http://b.example then https://a.example again"
        assert extract_urls(text) == ["https://a.example", "http://b.example"]

    def test_extract_urls_empty(self):
        assert extract_urls("") == []

    def test_build_model_from_env(self):
        with patch.dict("os.environ", {"SITEFORGE_BUILD_MODEL": "claude-test"}):
            assert initial_build_model() == "claude-test"

    def test_build_model_default(self):
        with patch.dict("os.environ", {}, clear=True):
            assert initial_build_model() == DEFAULT_BUILD_MODEL
