# -----------------------------------------------------------------------------
# CORE LAYER
# -----------------------------------------------------------------------------
# The business logic of SiteForge:
# - RepoProvisioner: GitHub repository from templates, ownership tags
# - SecretProvisioner: Sealed Actions secret for the agent
# - HostLinker: Netlify site deploying from the repository
# - JobDispatcher: AI edit workflow dispatch with bounded retries
# - StatusPoller: Latest run, classified
# - SiteRegistry: Owner-filtered listing
# - SiteManager: Orchestrator
# - DeployWatcher: Client-side polling state machine
# -----------------------------------------------------------------------------

from .dispatcher import DispatchError, JobDispatcher
from .host_linker import HostLinker, HostLinkError
from .policy import PolicyGate, PromptRejected, SiteNameRejected
from .provisioner import ProvisionError, RepoProvisioner
from .registry import SiteRegistry
from .repo_secrets import SecretProvisionError, SecretProvisioner
from .site_manager import SiteManager
from .status import StatusPoller, classify_run
from .watcher import DeployWatcher

__all__ = [
    "DispatchError", "JobDispatcher",
    "HostLinker", "HostLinkError",
    "PolicyGate", "PromptRejected", "SiteNameRejected",
    "ProvisionError", "RepoProvisioner",
    "SiteRegistry",
    "SecretProvisionError", "SecretProvisioner",
    "SiteManager",
    "StatusPoller", "classify_run",
    "DeployWatcher",
]
