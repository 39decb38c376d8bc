"""Repository root resolution.

Finds, for an import path, the repository that physically contains it and the
VCS managing that repository. Two tiers are tried in order:

1. Hosting conventions. Well-known hosts lay repositories out predictably
   (``github.com/<owner>/<repo>``, ``golang.org/x/<repo>``, ...), so the root
   and usually the VCS follow from the import path alone.
2. Directory walk. Repositories whose import path does not follow a hosting
   convention are found by walking up from the package directory until a
   ``.git``, ``.hg``, ``.bzr`` or ``.svn`` directory appears.

Both tiers only report repositories that are present in the workspace; a
missing repository raises RepoNotFoundError so callers can fetch it.
"""

import logging
import posixpath
import re
from dataclasses import dataclass

from pinlock.core.workspace import Workspace
from pinlock.domain.entities import METADATA_PROBE_ORDER, RepoRoot, VcsKind
from pinlock.domain.exceptions import RepoNotFoundError

logger = logging.getLogger(__name__)

_ELEMENT = r"[A-Za-z0-9_.\-]+"
_TRAILING = rf"(?:/{_ELEMENT})*$"


@dataclass(frozen=True)
class HostingRule:
    """Maps import paths on one host to their repository root.

    Attributes:
        prefix: Literal prefix checked before running the pattern.
        pattern: Regex with a ``root`` group (and optionally a ``vcs`` group).
        vcs: VCS used by the host; None when the host supports several and
            the metadata directory at the root decides.
    """

    prefix: str
    pattern: re.Pattern[str]
    vcs: VcsKind | None = None


HOSTING_RULES: tuple[HostingRule, ...] = (
    HostingRule(
        "github.com/",
        re.compile(rf"^(?P<root>github\.com/{_ELEMENT}/{_ELEMENT}){_TRAILING}"),
        VcsKind.GIT,
    ),
    HostingRule(
        "bitbucket.org/",
        re.compile(rf"^(?P<root>bitbucket\.org/{_ELEMENT}/{_ELEMENT}){_TRAILING}"),
    ),
    HostingRule(
        "launchpad.net/",
        re.compile(
            rf"^(?P<root>launchpad\.net/(?:~{_ELEMENT}/(?:\+junk|{_ELEMENT})/{_ELEMENT}|{_ELEMENT}))"
            rf"{_TRAILING}"
        ),
        VcsKind.BAZAAR,
    ),
    HostingRule(
        "code.google.com/",
        re.compile(rf"^(?P<root>code\.google\.com/[pr]/[a-z0-9\-]+(?:\.[a-z0-9\-]+)?){_TRAILING}"),
    ),
    HostingRule(
        "golang.org/x/",
        re.compile(rf"^(?P<root>golang\.org/x/{_ELEMENT}){_TRAILING}"),
        VcsKind.GIT,
    ),
    HostingRule(
        "gopkg.in/",
        re.compile(rf"^(?P<root>gopkg\.in/(?:[A-Za-z0-9_\-]+/)?[A-Za-z0-9_\-]+\.v[0-9]+){_TRAILING}"),
        VcsKind.GIT,
    ),
    HostingRule(
        "git.apache.org/",
        re.compile(rf"^(?P<root>git\.apache\.org/[a-z0-9_.\-]+\.git){_TRAILING}"),
        VcsKind.GIT,
    ),
    HostingRule(
        "hub.jazz.net/",
        re.compile(rf"^(?P<root>hub\.jazz\.net/git/[a-z0-9]+/{_ELEMENT}){_TRAILING}"),
        VcsKind.GIT,
    ),
    # Any host: example.com/path/repo.git/pkg
    HostingRule(
        "",
        re.compile(
            r"^(?P<root>[A-Za-z0-9.\-]+\.[A-Za-z0-9.\-]+(?::[0-9]+)?/[A-Za-z0-9_.\-/~]*?"
            rf"\.(?P<vcs>bzr|git|hg|svn)){_TRAILING}"
        ),
    ),
)


class RepoRootResolver:
    """Resolves import paths to the repositories holding them.

    Results are never cached: checkouts appear and disappear during sync.
    """

    def __init__(self, workspace: Workspace, rules: tuple[HostingRule, ...] = HOSTING_RULES) -> None:
        self._workspace = workspace
        self._rules = rules

    def resolve(self, import_path: str) -> RepoRoot:
        """Resolve the repository containing import_path.

        Args:
            import_path: Any package import path.

        Returns:
            RepoRoot of the enclosing repository.

        Raises:
            RepoNotFoundError: If the package is not in the workspace or no
                repository encloses it.
        """
        if self._workspace.find_dir(import_path) is None:
            raise RepoNotFoundError(import_path, "not present in the workspace")

        repo = self.resolve_by_convention(import_path)
        if repo is not None:
            return repo
        return self.resolve_by_walk(import_path)

    def resolve_by_convention(self, import_path: str) -> RepoRoot | None:
        """Resolve using hosting conventions only.

        Returns:
            RepoRoot, or None when no rule applies or the conventional root
            has no matching VCS metadata locally.
        """
        for rule in self._rules:
            if not import_path.startswith(rule.prefix):
                continue
            match = rule.pattern.match(import_path)
            if match is None:
                continue

            root = match.group("root")
            kind = rule.vcs
            if kind is None and match.groupdict().get("vcs"):
                kind = VcsKind(match.group("vcs"))
            return self._verify(root, kind)
        return None

    def resolve_by_walk(self, import_path: str) -> RepoRoot:
        """Resolve by walking up from the package directory.

        Raises:
            RepoNotFoundError: If no ancestor holds VCS metadata.
        """
        path = import_path.strip("/")
        while path:
            repo = self._verify(path, None)
            if repo is not None:
                return repo
            parent = posixpath.dirname(path)
            if parent == path:
                break
            path = parent
        raise RepoNotFoundError(import_path)

    def _verify(self, root: str, kind: VcsKind | None) -> RepoRoot | None:
        """Check that root exists locally with metadata for kind (any kind if None)."""
        local = self._workspace.find_dir(root)
        if local is None:
            logger.debug("Repository root %s not present locally", root)
            return None

        candidates = (kind,) if kind is not None else METADATA_PROBE_ORDER
        for candidate in candidates:
            if (local / candidate.metadata_dir).exists():
                return RepoRoot(root=root, vcs=candidate, local_path=local)
        logger.debug("No %s metadata found at %s", kind.value if kind else "VCS", local)
        return None
