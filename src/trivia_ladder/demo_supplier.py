"""
trivia_ladder.demo_supplier — Demo collaborators
================================================

Ready-to-use implementations of the two collaborator ABCs so the engine
can run without a real question bank or messaging channel.

Usage:
    from trivia_ladder import TriviaRunner, DemoQuestionSupplier, ConsoleTransport

    runner = TriviaRunner(transport=ConsoleTransport(), supplier=DemoQuestionSupplier())
"""

import logging
import random
from typing import Dict, List, Optional, Set, Tuple

from .callbacks import MessageTransport, QuestionSupplier
from .types import Question

logger = logging.getLogger("trivia_ladder.demo_supplier")


# (level, text, A, B, C, D, correct, category)
DEMO_QUESTIONS: List[Tuple[int, str, str, str, str, str, str, str]] = [
    (1, "What colour do you get by mixing blue and yellow?", "Green", "Purple", "Orange", "Brown", "A", "General"),
    (1, "How many days are in a leap year?", "364", "365", "366", "367", "C", "General"),
    (1, "Which animal is known as the king of the jungle?", "Elephant", "Lion", "Tiger", "Giraffe", "B", "Nature"),
    (1, "What is the capital of Nigeria?", "Lagos", "Kano", "Ibadan", "Abuja", "D", "Geography"),
    (1, "How many legs does a spider have?", "6", "8", "10", "12", "B", "Nature"),
    (1, "Which planet is closest to the Sun?", "Venus", "Earth", "Mercury", "Mars", "C", "Science"),
    (2, "Who wrote 'Things Fall Apart'?", "Wole Soyinka", "Chinua Achebe", "Ben Okri", "Chimamanda Adichie", "B", "Literature"),
    (2, "What is the chemical symbol for gold?", "Go", "Gd", "Au", "Ag", "C", "Science"),
    (2, "Which ocean is the largest?", "Atlantic", "Indian", "Arctic", "Pacific", "D", "Geography"),
    (2, "In what year did Nigeria gain independence?", "1957", "1960", "1963", "1970", "B", "History"),
    (2, "How many sides does a hexagon have?", "5", "6", "7", "8", "B", "Maths"),
    (2, "Which gas do plants absorb from the air?", "Oxygen", "Nitrogen", "Carbon dioxide", "Helium", "C", "Science"),
    (3, "What is the longest river in Africa?", "Congo", "Niger", "Zambezi", "Nile", "D", "Geography"),
    (3, "Who painted the Mona Lisa?", "Leonardo da Vinci", "Michelangelo", "Raphael", "Rembrandt", "A", "Art"),
    (3, "What is the square root of 169?", "11", "12", "13", "14", "C", "Maths"),
    (3, "Which element has atomic number 1?", "Helium", "Hydrogen", "Lithium", "Oxygen", "B", "Science"),
    (3, "Which country hosted the first FIFA World Cup?", "Brazil", "Italy", "Uruguay", "France", "C", "Sport"),
    (3, "What is the smallest prime number?", "0", "1", "2", "3", "C", "Maths"),
]


def _level_for(index: int) -> int:
    if index <= 5:
        return 1
    if index <= 10:
        return 2
    return 3


def _to_question(qid: int, row: Tuple) -> Question:
    _, text, a, b, c, d, correct, category = row
    return {
        "id": f"demo-{qid}",
        "text": text,
        "options": {"A": a, "B": b, "C": c, "D": d},
        "correct_option": correct,
        "category": category,
    }


class DemoQuestionSupplier(QuestionSupplier):
    """
    In-memory question bank.

    Questions are grouped in three difficulty levels. A player never gets
    the same question twice from one supplier instance; when a level runs
    dry, any unseen question is used.
    """

    def __init__(self, questions: Optional[List[Tuple]] = None, rng: Optional[random.Random] = None):
        rows = questions if questions is not None else DEMO_QUESTIONS
        self._questions: Dict[str, Tuple[int, Question]] = {}
        for i, row in enumerate(rows, start=1):
            question = _to_question(i, row)
            self._questions[question["id"]] = (row[0], question)
        self._rng = rng or random.Random()
        self._seen: Dict[str, Set[str]] = {}
        self.exposures: Dict[str, List[bool]] = {}

    def next_question(self, difficulty_index: int, player_id: str) -> Question:
        seen = self._seen.setdefault(player_id, set())
        unseen = [(lvl, q) for qid, (lvl, q) in self._questions.items() if qid not in seen]
        if not unseen:
            raise LookupError(f"question bank exhausted for {player_id}")
        level = _level_for(difficulty_index)
        pool = [q for lvl, q in unseen if lvl == level] or [q for _, q in unseen]
        question = self._rng.choice(pool)
        seen.add(question["id"])
        return dict(question)

    def record_exposure(self, question_id: str, was_correct: bool) -> None:
        self.exposures.setdefault(question_id, []).append(was_correct)


class ConsoleTransport(MessageTransport):
    """Prints outbound messages to stdout."""

    def send_text(self, identifier: str, text: str) -> None:
        print(f"\n[to {identifier}]\n{text}\n")

    def send_image(self, identifier: str, path: str, caption: str = "") -> None:
        print(f"\n[to {identifier}] <image {path}> {caption}\n")


class RecordingTransport(MessageTransport):
    """Keeps every outbound message in memory (tests, scripted demos)."""

    def __init__(self) -> None:
        self.sent: List[Tuple[str, str]] = []
        self.images: List[Tuple[str, str, str]] = []

    def send_text(self, identifier: str, text: str) -> None:
        self.sent.append((identifier, text))

    def send_image(self, identifier: str, path: str, caption: str = "") -> None:
        self.images.append((identifier, path, caption))

    def texts_for(self, identifier: str) -> List[str]:
        return [text for who, text in self.sent if who == identifier]

    def last_text(self, identifier: str) -> Optional[str]:
        texts = self.texts_for(identifier)
        return texts[-1] if texts else None

    def clear(self) -> None:
        self.sent.clear()
        self.images.clear()
