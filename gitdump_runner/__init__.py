"""git-dump-runner - Dump exposed .git directories from inside a container.

This package builds a small image carrying git-dumper, runs it against a
remote .git URL and leaves the recovered repository in a host directory.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
