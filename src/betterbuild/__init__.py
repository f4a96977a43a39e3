from .model import NOOP, BuildContext, Changed, Dependency, Lock, NoOp, StepResult
from .tasks import task
from .scm import SCM, SCMRegistry
from .bootstrap import make_context

__all__ = [
    "NOOP", "BuildContext", "Changed", "Dependency", "Lock", "NoOp", "StepResult",
    "task", "SCM", "SCMRegistry", "make_context",
]
