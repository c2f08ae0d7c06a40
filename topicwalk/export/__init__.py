from .formats import (
    topic_to_dict, result_to_dict, report_to_dict, report_to_markdown,
    topic_ancestry, build_topic_graph
)
