"""External-command VCS adapters (git, hg, bzr, svn)."""

from pinlock.adapters.vcs_cmd.commands import VCS_COMMANDS, CommandVcs, VcsCommand, vcs_for

__all__ = ["VCS_COMMANDS", "CommandVcs", "VcsCommand", "vcs_for"]
