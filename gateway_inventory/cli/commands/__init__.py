"""
CLI команды.

- serve.py: serve
- sync.py: sync, push
- topology.py: tree
- export.py: export
- maintenance.py: dedupe-switches, purge-without-mac
- validate.py: validate-config
"""

from .export import cmd_export
from .maintenance import cmd_dedupe_switches, cmd_purge_without_mac
from .serve import cmd_serve
from .sync import cmd_push, cmd_sync
from .topology import cmd_tree
from .validate import cmd_validate_config

__all__ = [
    "cmd_serve",
    "cmd_sync",
    "cmd_push",
    "cmd_tree",
    "cmd_export",
    "cmd_dedupe_switches",
    "cmd_purge_without_mac",
    "cmd_validate_config",
]
