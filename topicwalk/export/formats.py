"""
export formats - JSON-ready dicts, markdown transcripts and the topic graph.
nothing here writes files; callers decide where output goes.
"""

from datetime import datetime
from typing import Dict, Any, List, Iterable, Optional

import networkx as nx

from ..core.models import (
    Topic, ScoredTopic, ExpansionResult, ResearchReport, normalize_topic
)


def topic_to_dict(topic: Topic) -> Dict[str, Any]:
    """plain dict for one topic."""
    data = {
        "text": topic.text,
        "level": topic.level,
        "parent_topic": topic.parent_topic,
        "score": topic.score
    }
    if isinstance(topic, ScoredTopic):
        data["reasoning"] = topic.reasoning
        data["dimensions"] = topic.dimensions.to_dict() if topic.dimensions else None
    return data


def result_to_dict(result: ExpansionResult) -> Dict[str, Any]:
    """serializable form of an expansion result."""
    return {
        "meta": {
            "generated_at": datetime.now().isoformat(),
            "topics_expanded": result.topics_expanded,
            "topics_skipped": result.topics_skipped,
            "queries_used": result.queries_used,
            "max_level_reached": result.max_level_reached
        },
        "responses": dict(result.responses),
        "tree": [topic_to_dict(t) for t in result.tree]
    }


def report_to_dict(report: ResearchReport) -> Dict[str, Any]:
    """serializable form of a research report."""
    return {
        "session_id": report.session_id,
        "task_goal": report.task_goal,
        "start_time": report.start_time.isoformat(),
        "end_time": report.end_time.isoformat(),
        "duration_seconds": report.duration_seconds,
        "pairs": [p.to_dict() for p in report.pairs]
    }


def report_to_markdown(report: ResearchReport) -> str:
    """research transcript as markdown."""
    lines = [
        f"# Research Report: {report.task_goal}",
        "",
        f"- Session: {report.session_id}",
        f"- Started: {report.start_time.isoformat(timespec='seconds')}",
        f"- Duration: {report.duration_seconds:.1f}s",
        f"- Queries: {len(report.pairs)}",
        ""
    ]

    for i, pair in enumerate(report.pairs, 1):
        lines.append(f"## {i}. {pair.question}")
        meta = f"_source: {pair.source.value}"
        if pair.relevance_score is not None:
            meta += f", relevance: {pair.relevance_score:.0f}"
        lines.append(meta + "_")
        lines.append("")
        lines.append(pair.answer)
        if pair.citations:
            lines.append("")
            lines.append(f"**Sources:** {', '.join(pair.citations)}")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def topic_ancestry(tree: Iterable[Topic], topic_text: str) -> List[Topic]:
    """
    chain of topics from the root down to topic_text.
    resolved by key lookup in the tree log, not by following references.
    """
    index: Dict[str, Topic] = {}
    for t in tree:
        index.setdefault(normalize_topic(t.text), t)

    chain: List[Topic] = []
    seen = set()
    key: Optional[str] = normalize_topic(topic_text)

    while key and key in index and key not in seen:
        seen.add(key)
        topic = index[key]
        chain.append(topic)
        key = normalize_topic(topic.parent_topic) if topic.parent_topic else None

    chain.reverse()
    return chain


def build_topic_graph(tree: Iterable[Topic]) -> "nx.DiGraph":
    """
    directed topic graph: parent -> child.
    nodes are normalized keys; parents missing from the tree are left out.
    """
    graph = nx.DiGraph()
    topics = list(tree)

    for t in topics:
        key = normalize_topic(t.text)
        if key not in graph:
            graph.add_node(key, text=t.text, level=t.level, score=t.score)

    for t in topics:
        if not t.parent_topic:
            continue
        parent = normalize_topic(t.parent_topic)
        child = normalize_topic(t.text)
        if parent in graph and parent != child:
            graph.add_edge(parent, child)

    return graph
