"""Go toolchain adapter (package loading, fetching, command builds)."""

from pinlock.adapters.go_cmd.toolchain import GoToolchain, scan_imports

__all__ = ["GoToolchain", "scan_imports"]
