# -----------------------------------------------------------------------------
# SITE TEMPLATES
# -----------------------------------------------------------------------------
# The four files committed into every new site repository:
#
# - index.html                     starter homepage
# - CLAUDE.md                      editing rules the agent reads first
# - netlify.toml                   publish the repo root, allow iframing
# - .github/workflows/ai-edit.yml  the workflow the dispatcher triggers
#
# Contents are shipped as package data and committed verbatim, except the
# homepage placeholder title.
# -----------------------------------------------------------------------------

from pathlib import Path

from siteforge.domain.models import TemplateFile

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

# Placeholder site name inside index.html
SITE_NAME_PLACEHOLDER = "My Site"

WORKFLOW_FILE = "ai-edit.yml"

# (repository path, packaged file name)
_TEMPLATE_LAYOUT = [
    ("index.html", "index.html"),
    ("CLAUDE.md", "CLAUDE.md"),
    ("netlify.toml", "netlify.toml"),
    (f".github/workflows/{WORKFLOW_FILE}", WORKFLOW_FILE),
]


def _read(name: str) -> str:
    return (TEMPLATES_DIR / name).read_text(encoding="utf-8")


def get_template_files(site_name: str) -> list[TemplateFile]:
    """Template files for a new site, homepage titled with `site_name`."""
    files = []
    for repo_path, source in _TEMPLATE_LAYOUT:
        content = _read(source)
        if repo_path == "index.html":
            content = content.replace(SITE_NAME_PLACEHOLDER, site_name)
        files.append(TemplateFile(path=repo_path, content=content))
    return files
