"""Container orchestration module.

This module handles:
- Creating the git-dumper container with the output bind mount
- Starting it, streaming its logs, and removing it on completion
"""

from gitdump_runner.container.runner import (
    compose_entrypoint,
    create_container,
    run_container,
)

__all__ = ["compose_entrypoint", "create_container", "run_container"]
