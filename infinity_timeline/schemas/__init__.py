from . import user
from . import flow
from . import node_resources
from . import functions
from . import editor

__all__ = ["user", "flow", "node_resources", "functions", "editor"]
