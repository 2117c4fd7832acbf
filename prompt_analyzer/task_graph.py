"""
Task Graph Module
Extracts actionable statements from a prompt and links them into a dependency graph.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .base_types import (
    TaskType, Priority, Effort, RelationType, safe_divide, clamp, jaccard,
    truncate, title_case, first_word, strip_leading_phrases, significant_terms,
    round_half_up
)
from .lexicons import Lexicons, STOP_WORD_SET

logger = logging.getLogger(__name__)

MAX_SENTENCES = 100
MAX_TASKS = 50
MAX_TITLE_LENGTH = 100
RELATED_THRESHOLD = 0.5
SUBTASK_STRENGTH = 0.7
POLITE_PREFIXES = ('please', 'kindly', 'can you', 'could you', 'would you', 'will you')


@dataclass
class TextRange:
    start_char: int = 0
    end_char: int = 0
    start_line: int = 0
    end_line: int = 0
    sentence_num: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'start_char': self.start_char,
            'end_char': self.end_char,
            'start_line': self.start_line,
            'end_line': self.end_line,
            'sentence_num': self.sentence_num,
        }


@dataclass
class Task:
    id: str
    title: str
    description: str
    type: TaskType
    priority: Priority
    estimated_effort: Effort
    confidence: float
    source_text: str
    text_position: TextRange
    status: str = "open"
    keywords: List[str] = field(default_factory=list)
    action_verbs: List[str] = field(default_factory=list)
    related_task_ids: List[str] = field(default_factory=list)
    depends_on: List[str] = field(default_factory=list)
    blocks: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'type': self.type.value,
            'status': self.status,
            'priority': self.priority.value,
            'source_text': self.source_text,
            'text_position': self.text_position.to_dict(),
            'keywords': list(self.keywords),
            'related_task_ids': list(self.related_task_ids),
            'depends_on': list(self.depends_on),
            'blocks': list(self.blocks),
            'confidence': round_half_up(self.confidence),
            'action_verbs': list(self.action_verbs),
            'estimated_effort': self.estimated_effort.value,
        }


@dataclass
class TaskRelationship:
    from_task_id: str
    to_task_id: str
    relation_type: RelationType
    strength: float
    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'from_task_id': self.from_task_id,
            'to_task_id': self.to_task_id,
            'relation_type': self.relation_type.value,
            'strength': round_half_up(self.strength),
            'reason': self.reason,
        }


@dataclass
class TaskGraph:
    tasks: List[Task] = field(default_factory=list)
    relationships: List[TaskRelationship] = field(default_factory=list)
    root_tasks: List[str] = field(default_factory=list)
    leaf_tasks: List[str] = field(default_factory=list)
    critical_path: List[str] = field(default_factory=list)
    graph_complexity: float = 0.0

    @property
    def total_tasks(self) -> int:
        return len(self.tasks)

    def get_task(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def dependency_edges(self) -> List[TaskRelationship]:
        return [r for r in self.relationships
                if r.relation_type in (RelationType.DEPENDS_ON, RelationType.BLOCKS)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tasks': [t.to_dict() for t in self.tasks],
            'relationships': [r.to_dict() for r in self.relationships],
            'root_tasks': list(self.root_tasks),
            'leaf_tasks': list(self.leaf_tasks),
            'critical_path': list(self.critical_path),
            'total_tasks': self.total_tasks,
            'graph_complexity': round_half_up(self.graph_complexity),
        }


def contains_phrase(padded: str, phrase: str) -> bool:
    """Whole-word phrase lookup in text normalized to `` words separated by spaces ``."""
    return f" {phrase.strip()} " in padded


def normalize_for_matching(sentence: str) -> str:
    lowered = re.sub(r"[^\w\s']", " ", sentence.lower())
    return f" {' '.join(lowered.split())} "


class TaskGraphExtractor:
    """
    Builds a TaskGraph from sentences.

    Sentences come from the idea clusters in source order; when no clusters
    exist the raw text is split on ". " instead. Dependency edges always point
    from prerequisite to dependent and are only added when the graph stays
    acyclic.
    """

    def __init__(self):
        lex = Lexicons
        self.imperative_verbs = lex.words('imperative_verbs')
        self.sequence_markers = lex.phrases('tasks', 'sequence_markers')
        self.dependency_markers = lex.phrases('tasks', 'dependency_markers')
        self.blocking_markers = lex.phrases('tasks', 'blocking_markers')
        self.action_patterns = lex.phrases('tasks', 'action_patterns')
        self.requirement_patterns = lex.phrases('tasks', 'requirement_patterns')
        self.goal_patterns = lex.phrases('tasks', 'goal_patterns')
        self.need_patterns = lex.phrases('tasks', 'need_patterns')
        self.high_priority = lex.phrases('tasks', 'high_priority')
        self.low_priority = lex.phrases('tasks', 'low_priority')
        self.large_effort = lex.phrases('tasks', 'large_effort')
        self.small_effort = lex.phrases('tasks', 'small_effort')
        self.complex_verbs = lex.words('tasks', 'complex_verbs')

    def extract(self, text: str, clusters: Sequence[Any] = ()) -> TaskGraph:
        sentences, cluster_keywords = self._collect_sentences(text, clusters)
        tasks = self._extract_tasks(text, sentences, cluster_keywords)
        graph = TaskGraph(tasks=tasks)
        graph.relationships = self._link_tasks(tasks, sentences)
        graph.root_tasks = [t.id for t in tasks if not t.depends_on]
        graph.leaf_tasks = [t.id for t in tasks if not t.blocks]
        graph.critical_path = self.critical_path(tasks)
        graph.graph_complexity = self.graph_complexity(graph)
        logger.debug(f"Task graph: {graph.total_tasks} tasks, {len(graph.relationships)} relationships, "
                     f"critical path {len(graph.critical_path)}")
        return graph

    @staticmethod
    def _collect_sentences(text: str, clusters: Sequence[Any]) -> Tuple[List[str], List[List[str]]]:
        indexed = []
        for cluster in clusters:
            for index, sentence in zip(cluster.sentence_indices, cluster.sentences):
                indexed.append((index, sentence, cluster.key_words))
        if indexed:
            indexed.sort(key=lambda item: item[0])
            sentences = [item[1] for item in indexed]
            keywords = [list(item[2]) for item in indexed]
        else:
            sentences = [s.strip() for s in text.split(". ") if s.strip()]
            keywords = [[] for _ in sentences]
        return sentences[:MAX_SENTENCES], keywords[:MAX_SENTENCES]

    def _extract_tasks(self, text: str, sentences: List[str],
                       cluster_keywords: List[List[str]]) -> List[Task]:
        tasks: List[Task] = []
        cursor = 0
        for number, sentence in enumerate(sentences, start=1):
            start = text.find(sentence, cursor)
            if start == -1:
                start = text.find(sentence)
            if start >= 0:
                cursor = start + len(sentence)
            if len(tasks) >= MAX_TASKS:
                continue
            task = self._build_task(len(tasks) + 1, sentence, cluster_keywords[number - 1])
            if task is None:
                continue
            start = max(start, 0)
            task.text_position = TextRange(
                start_char=start,
                end_char=start + len(sentence),
                start_line=text.count('\n', 0, start) + 1,
                end_line=text.count('\n', 0, start + len(sentence)) + 1,
                sentence_num=number,
            )
            tasks.append(task)
        return tasks

    def _build_task(self, number: int, sentence: str, cluster_keywords: List[str]) -> Optional[Task]:
        core = strip_leading_phrases(sentence, self.sequence_markers)
        padded = normalize_for_matching(core)
        leading_imperative = first_word(core) in self.imperative_verbs

        is_question = '?' in sentence
        has_action = any(contains_phrase(padded, p) for p in self.action_patterns)
        has_requirement = any(contains_phrase(padded, p) for p in self.requirement_patterns)
        has_goal = any(contains_phrase(padded, p) for p in self.goal_patterns)
        has_need = any(contains_phrase(padded, p) for p in self.need_patterns)

        if is_question:
            task_type = TaskType.QUESTION
        elif leading_imperative or has_action:
            task_type = TaskType.ACTION
        elif has_requirement:
            task_type = TaskType.REQUIREMENT
        elif has_goal:
            task_type = TaskType.GOAL
        elif has_need:
            task_type = TaskType.NEED
        else:
            return None

        confidence = 0.2
        if has_action:
            confidence += 0.3
        if has_requirement:
            confidence += 0.2
        if is_question:
            confidence += 0.2
        if has_goal:
            confidence += 0.1
        if leading_imperative:
            confidence += 0.2

        terms = list(dict.fromkeys(significant_terms(core, STOP_WORD_SET)))
        for keyword in cluster_keywords:
            if keyword not in terms and keyword in padded:
                terms.append(keyword)

        words = padded.split()
        action_verbs = list(dict.fromkeys(w for w in words if w in self.imperative_verbs))

        return Task(
            id=f"task_{number}",
            title=self._title(core),
            description=sentence,
            type=task_type,
            priority=self._priority(padded),
            estimated_effort=self._effort(padded, words),
            confidence=clamp(confidence),
            source_text=sentence,
            text_position=TextRange(),
            keywords=terms,
            action_verbs=action_verbs,
        )

    @staticmethod
    def _title(core: str) -> str:
        title = strip_leading_phrases(core, POLITE_PREFIXES).rstrip('.!;: ')
        return truncate(title_case(title), MAX_TITLE_LENGTH)

    def _priority(self, padded: str) -> Priority:
        if any(contains_phrase(padded, p) for p in self.high_priority):
            return Priority.HIGH
        if any(contains_phrase(padded, p) for p in self.low_priority):
            return Priority.LOW
        return Priority.MEDIUM

    def _effort(self, padded: str, words: List[str]) -> Effort:
        complex_count = sum(1 for w in words if w in self.complex_verbs)
        if complex_count >= 2 or any(contains_phrase(padded, p) for p in self.large_effort):
            return Effort.LARGE
        if any(contains_phrase(padded, p) for p in self.small_effort):
            return Effort.SMALL
        return Effort.MEDIUM

    def _leads_with_marker(self, sentence: str, markers: Tuple[str, ...]) -> bool:
        lower = strip_leading_phrases(sentence, ('and', 'please')).lower()
        for marker in markers:
            if lower.startswith(marker) and (len(lower) == len(marker) or not lower[len(marker)].isalnum()):
                return True
        return False

    def _link_tasks(self, tasks: List[Task], sentences: List[str]) -> List[TaskRelationship]:
        relationships: List[TaskRelationship] = []
        by_id = {t.id: t for t in tasks}

        for j, later in enumerate(tasks):
            if j == 0:
                continue
            earlier = tasks[j - 1]
            similarity = jaccard(set(later.keywords), set(earlier.keywords))
            padded = normalize_for_matching(later.source_text)

            if any(contains_phrase(padded, m) for m in self.blocking_markers):
                if self._add_dependency(by_id, prerequisite=later, dependent=earlier):
                    relationships.append(TaskRelationship(
                        later.id, earlier.id, RelationType.BLOCKS, 0.8 + 0.2 * similarity,
                        "must happen before the preceding task"))
            elif self._leads_with_marker(later.source_text, self.dependency_markers):
                if self._add_dependency(by_id, prerequisite=earlier, dependent=later):
                    relationships.append(TaskRelationship(
                        later.id, earlier.id, RelationType.DEPENDS_ON, 0.8 + 0.2 * similarity,
                        "sequential marker"))

        for i, first in enumerate(tasks):
            for second in tasks[i + 1:]:
                if second.id in first.depends_on or first.id in second.depends_on:
                    continue
                left, right = set(first.keywords), set(second.keywords)
                similarity = jaccard(left, right)
                if similarity >= RELATED_THRESHOLD:
                    first.related_task_ids.append(second.id)
                    second.related_task_ids.append(first.id)
                    relationships.append(TaskRelationship(
                        first.id, second.id, RelationType.RELATED, similarity, "shared keywords"))
                elif left and right and (left < right or right < left):
                    child, parent = (first, second) if len(first.title) < len(second.title) else (second, first)
                    if set(child.keywords) <= set(parent.keywords):
                        relationships.append(TaskRelationship(
                            child.id, parent.id, RelationType.SUBTASK, SUBTASK_STRENGTH,
                            "keywords contained in a broader task"))
        return relationships

    @staticmethod
    def _add_dependency(by_id: Dict[str, Task], prerequisite: Task, dependent: Task) -> bool:
        """Record prerequisite -> dependent unless it would close a cycle."""
        if prerequisite.id == dependent.id or prerequisite.id in dependent.depends_on:
            return False
        # A cycle appears if the prerequisite already (transitively) depends on the dependent.
        stack, seen = [prerequisite.id], set()
        while stack:
            current = stack.pop()
            if current == dependent.id:
                return False
            if current in seen:
                continue
            seen.add(current)
            stack.extend(by_id[current].depends_on)
        dependent.depends_on.append(prerequisite.id)
        prerequisite.blocks.append(dependent.id)
        return True

    @staticmethod
    def critical_path(tasks: List[Task]) -> List[str]:
        """Longest dependency chain; ties resolve to the earliest task."""
        if not tasks:
            return []
        order = {t.id: n for n, t in enumerate(tasks)}
        by_id = {t.id: t for t in tasks}

        indegree = {t.id: len(t.depends_on) for t in tasks}
        ready = [t.id for t in tasks if indegree[t.id] == 0]
        topological: List[str] = []
        while ready:
            ready.sort(key=lambda task_id: order[task_id])
            current = ready.pop(0)
            topological.append(current)
            for blocked in by_id[current].blocks:
                indegree[blocked] -= 1
                if indegree[blocked] == 0:
                    ready.append(blocked)

        length: Dict[str, int] = {}
        previous: Dict[str, Optional[str]] = {}
        for task_id in topological:
            best, best_length = None, 0
            for prerequisite in sorted(by_id[task_id].depends_on, key=lambda p: order[p]):
                if length.get(prerequisite, 0) > best_length:
                    best, best_length = prerequisite, length[prerequisite]
            length[task_id] = best_length + 1
            previous[task_id] = best

        end = max(topological, key=lambda task_id: (length[task_id], -order[task_id]))
        path = []
        current: Optional[str] = end
        while current is not None:
            path.append(current)
            current = previous[current]
        return list(reversed(path))

    @staticmethod
    def graph_complexity(graph: TaskGraph) -> float:
        n = graph.total_tasks
        if n <= 1:
            return 0.0
        edge_ratio = safe_divide(len(graph.relationships), n * (n - 1) / 2)
        dependency_ratio = safe_divide(len(graph.dependency_edges()), n - 1)
        depth_ratio = safe_divide(len(graph.critical_path) - 1, n - 1)
        return min(1.0, (edge_ratio + dependency_ratio + depth_ratio) / 3)
