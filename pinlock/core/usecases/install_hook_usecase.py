"""Install use case: add git hooks that apply lock-file changes after a pull."""

import logging
import stat
from dataclasses import dataclass
from pathlib import Path

from pinlock.core.repo_root import RepoRootResolver
from pinlock.domain.entities import VcsKind
from pinlock.domain.exceptions import HookInstallError

logger = logging.getLogger(__name__)

GIT_HOOK = """\
#!/bin/bash
set -e

if [[ $GIT_REFLOG_ACTION != pull* ]]; then
        exit 0
fi

LOG=$(git log -U0 --oneline -p HEAD@{1}..HEAD GLOCKFILE)
[ -z "$LOG" ] && echo "pinlock: no changes to apply" && exit 0
echo "pinlock: applying updates..."
pinlock apply <<< "$LOG"
"""

# post-merge covers "git pull", post-checkout covers "git pull --rebase".
GIT_HOOK_NAMES = ("post-merge", "post-checkout")


@dataclass
class InstallHookResponse:
    repo_root: str
    installed: list[Path]


class InstallHookUseCase:
    """Use case for installing the apply hooks into a project's repository."""

    def __init__(self, resolver: RepoRootResolver) -> None:
        self._resolver = resolver

    def execute(self, import_path: str) -> InstallHookResponse:
        """Write the hooks into the repository containing import_path.

        Raises:
            RepoNotFoundError: If no repository encloses the package.
            HookInstallError: If the repository is not git or a hook cannot
                be written.
        """
        repo = self._resolver.resolve_by_walk(import_path)
        if repo.vcs != VcsKind.GIT:
            raise HookInstallError(f"{repo.vcs.value} hook not implemented")

        hooks_dir = repo.local_path / ".git" / "hooks"
        installed: list[Path] = []
        for name in GIT_HOOK_NAMES:
            hook = hooks_dir / name
            try:
                hooks_dir.mkdir(parents=True, exist_ok=True)
                hook.write_text(GIT_HOOK, encoding="utf-8")
                hook.chmod(hook.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
            except OSError as e:
                raise HookInstallError(f"cannot write {hook}: {e.strerror or e}") from e
            logger.debug("Installed %s", hook)
            installed.append(hook)
        return InstallHookResponse(repo_root=repo.root, installed=installed)
