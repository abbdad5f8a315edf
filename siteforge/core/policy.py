# -----------------------------------------------------------------------------
# THE GATEKEEPER - INPUT POLICY
# -----------------------------------------------------------------------------
# Responsibility: Reject bad site names and edit prompts BEFORE any call to
# GitHub or Netlify. A rejected request leaves no trace upstream.
#
# Limits are loaded from policy.yaml; built-in defaults apply if it is absent.
# -----------------------------------------------------------------------------

import re
from pathlib import Path

import yaml
from pydantic import BaseModel
from rich.console import Console

console = Console()

# Policy file location
POLICY_PATH = Path(__file__).parent.parent / "policy.yaml"

DEFAULT_NAME_PATTERN = r"^[a-z0-9-]+$"
# GitHub caps each workflow_dispatch input at 65535 characters
DEFAULT_MAX_PROMPT_LENGTH = 65535

NAME_RULE_MESSAGE = "Site name must be lowercase letters, numbers, and hyphens only"


class PolicyConfig(BaseModel):
    """
    Pydantic model for the policy configuration.

    Loaded from policy.yaml at startup.
    """

    name_pattern: str = DEFAULT_NAME_PATTERN
    max_prompt_length: int = DEFAULT_MAX_PROMPT_LENGTH


class SiteNameRejected(Exception):
    """Raised when a site name fails validation."""

    def __init__(self, message: str = NAME_RULE_MESSAGE, rule: str = "name_pattern") -> None:
        super().__init__(message)
        self.rule = rule


class PromptRejected(Exception):
    """Raised when an edit prompt fails validation."""

    def __init__(self, message: str, rule: str) -> None:
        super().__init__(message)
        self.rule = rule


class PolicyGate:
    """Validates user input against policy."""

    def __init__(self, policy_path: Path = POLICY_PATH) -> None:
        """
        Initialize the Policy Gate.

        Args:
            policy_path: Path to the policy YAML file.
        """
        self._policy_path = policy_path
        self._config: PolicyConfig = self._load_policy()
        self._name_re = re.compile(self._config.name_pattern)

    @property
    def config(self) -> PolicyConfig:
        return self._config

    def _load_policy(self) -> PolicyConfig:
        if not self._policy_path.exists():
            console.print("[yellow][GATEKEEPER] Policy file not found, using defaults[/yellow]")
            return PolicyConfig()

        with open(self._policy_path) as f:
            data = yaml.safe_load(f) or {}

        return PolicyConfig(**data)

    def validate_site_name(self, name: str | None) -> str:
        """
        Check a site name.

        Returns:
            The name, unchanged.

        Raises:
            SiteNameRejected: If the name is empty or does not match the pattern.
        """
        if not name or not self._name_re.fullmatch(name):
            console.print(f"[red][GATEKEEPER] Rejected site name: {name!r}[/red]")
            raise SiteNameRejected()
        return name

    def validate_prompt(self, prompt: str | None) -> str:
        """
        Check an edit prompt.

        Raises:
            PromptRejected: If the prompt is blank or too long.
        """
        if not prompt or not prompt.strip():
            raise PromptRejected("Prompt must not be empty", rule="prompt_required")

        if len(prompt) > self._config.max_prompt_length:
            console.print(f"[red][GATEKEEPER] Prompt too long ({len(prompt)} chars)[/red]")
            raise PromptRejected(
                f"Prompt is too long ({len(prompt)} > {self._config.max_prompt_length} characters)",
                rule="max_prompt_length",
            )
        return prompt
