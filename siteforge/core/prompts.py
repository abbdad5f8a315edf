# -----------------------------------------------------------------------------
# AGENT PROMPTS
# -----------------------------------------------------------------------------
# The prompt sent with the first AI run of a site created with a
# description. Edit prompts typed later in the dashboard go out untouched.
#
# URLs in the description are scraped into reference/ by the workflow itself;
# the prompt only tells the agent whether to expect that folder.
# -----------------------------------------------------------------------------

import os
import re

# Higher-capability model for the first full build
DEFAULT_BUILD_MODEL = "claude-opus-4-1-20250805"

# Same pattern the workflow uses to pick URLs out of the prompt
URL_PATTERN = re.compile(r"https?://[^\s\"'<>]+")


def initial_build_model() -> str:
    return os.getenv("SITEFORGE_BUILD_MODEL", DEFAULT_BUILD_MODEL)


def extract_urls(text: str) -> list[str]:
    """URLs in `text`, in order, without duplicates."""
    seen: list[str] = []
    for url in URL_PATTERN.findall(text or ""):
        if url not in seen:
            seen.append(url)
    return seen


def build_initial_prompt(site_name: str, description: str) -> str:
    """
    Prompt for the first build of a site.

    The user's description is embedded verbatim.
    """
    urls = extract_urls(description)

    if urls:
        source_instructions = f"""The description links to existing site(s):
{chr(10).join(f"- {url}" for url in urls)}

They have been scraped into the reference/ directory. Recreate that site in full:
- Read EVERY HTML file in reference/, including subpages
- Carry over ALL real content: text, headings, listings, prices, addresses, phone numbers, team members
- Copy downloaded images into images/; hotlink the original URLs for anything missing
- Reproduce every page and every navigation link, not a summary"""
    else:
        source_instructions = """There is no reference site. Write real, specific copy that fits the
description; invent plausible details where needed, never placeholder text."""

    return f"""Build out the complete website "{site_name}" from scratch, replacing the starter template.

The user described the site like this:

{description}

{source_instructions}

Requirements:
1. Read CLAUDE.md first and follow every rule in it.
2. Replace ALL starter content in index.html; add more pages if the site needs them.
3. Design: a distinctive, modern look that matches the description (colors, typography, mood).
4. Fully responsive, valid HTML, working navigation, no lorem ipsum.
5. Include a contact section using Netlify Forms when it makes sense for the site.
6. Commit everything with a descriptive message when finished."""
