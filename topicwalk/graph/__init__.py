# graph - topic scheduling and the expansion loop
from .expansion_state import ExpansionState
from .expansion import ExpansionEngine, ExpansionStats

__all__ = ["ExpansionState", "ExpansionEngine", "ExpansionStats"]
