"""DSA problem catalog package."""
from .catalog import MAX_PER_TOPIC, MIN_PER_TOPIC, ProblemCatalog, load_problems, shuffled

__all__ = ["MAX_PER_TOPIC", "MIN_PER_TOPIC", "ProblemCatalog", "load_problems", "shuffled"]
