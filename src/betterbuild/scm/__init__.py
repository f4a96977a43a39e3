from .base import SCM, lock_of
from .git import GitSCM
from .raw import RawSCM
from .registry import SCMRegistry, get_registry, set_registry

__all__ = ["SCM", "lock_of", "GitSCM", "RawSCM", "SCMRegistry", "get_registry", "set_registry"]
