# interaction - contracts for the external answering service
from .clicker import TopicClicker, TopicSource, NullTopicSource, BoundedClicker

__all__ = ["TopicClicker", "TopicSource", "NullTopicSource", "BoundedClicker"]
