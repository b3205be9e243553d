"""Scanner command templates: repository, branch and credential substitution."""

from __future__ import annotations

from scangate.core.config import get_settings
from scangate.core.logging import get_logger

logger = get_logger(__name__)

REPO_TOKEN = "%GIT_REPO%"
BRANCH_TOKEN = "%GIT_BRANCH%"
# Bare token: existing templates write it as `echo 'GIT_PRIVATE_SSH_KEY' > ...`
SSH_KEY_TOKEN = "GIT_PRIVATE_SSH_KEY"


def handle_cmd(repository_url: str, branch: str, cmd: str) -> str:
    """Replace the repository and branch tokens in ``cmd``.

    Returns ``""`` when any argument is empty; callers treat that as a
    configuration error rather than "nothing to run".
    """
    if not (repository_url and branch and cmd):
        return ""
    return cmd.replace(REPO_TOKEN, repository_url).replace(BRANCH_TOKEN, branch)


def handle_private_ssh_key(cmd: str, private_key: str | None = None) -> str:
    """Replace the SSH key token with the configured private key.

    A missing key is substituted as an empty string; the scanner then fails
    to clone and reports it in its own output.
    """
    if private_key is None:
        private_key = get_settings().git_private_ssh_key
    if SSH_KEY_TOKEN in cmd and not private_key:
        logger.warning("No private SSH key configured, substituting an empty value")
    return cmd.replace(SSH_KEY_TOKEN, private_key)


def resolve_command(
    repository_url: str,
    branch: str,
    template: str,
    private_key: str | None = None,
) -> str:
    cmd = handle_cmd(repository_url, branch, template)
    if not cmd:
        return ""
    return handle_private_ssh_key(cmd, private_key)
