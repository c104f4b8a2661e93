"""Model package for bundlestrap."""

from bundlestrap.models.bootstrap_config import BootstrapConfig, derive_bundle_dir_name
from bundlestrap.models.child_process import ChildOutcome, ChildProcessHandle

__all__ = [
    "BootstrapConfig",
    "ChildOutcome",
    "ChildProcessHandle",
    "derive_bundle_dir_name",
]
