"""Canned completion payloads shaped like real model output."""

from __future__ import annotations

import json
from typing import Any, Optional

SURVEY_QUESTIONS = [
    ("How satisfied are you with our service overall?", "star-rating"),
    ("How likely are you to recommend us to a friend?", "opinion-scale"),
    ("Which of our products do you use?", "checkboxes"),
    ("What could we improve?", "long-answer"),
    ("What is your email address?", "email"),
]

TRIVIA = [
    ("What is the capital of France?", ["Paris", "London", "Berlin", "Madrid"], "Paris"),
    ("Which planet is known as the Red Planet?", ["Venus", "Mars", "Jupiter", "Saturn"], "Mars"),
    ("Who painted the Mona Lisa?", ["Michelangelo", "Raphael", "Leonardo da Vinci", "Donatello"], "Leonardo da Vinci"),
    ("What is the largest ocean on Earth?", ["Atlantic", "Indian", "Arctic", "Pacific"], "Pacific"),
    ("How many continents are there?", ["5", "6", "7", "8"], "7"),
    ("What gas do plants absorb from the air?", ["Oxygen", "Nitrogen", "Carbon dioxide", "Helium"], "Carbon dioxide"),
    ("Which element has the chemical symbol O?", ["Gold", "Oxygen", "Osmium", "Iron"], "Oxygen"),
    ("In which year did World War II end?", ["1943", "1944", "1945", "1946"], "1945"),
    ("What is the hardest natural substance?", ["Gold", "Iron", "Diamond", "Quartz"], "Diamond"),
    ("Which language has the most native speakers?", ["English", "Spanish", "Hindi", "Mandarin"], "Mandarin"),
]

CAPITALS = [
    ("What is the capital of Japan?", ["Osaka", "Kyoto", "Tokyo", "Nagoya"], "Tokyo"),
    ("What is the capital of Australia?", ["Sydney", "Melbourne", "Canberra", "Perth"], "Canberra"),
    ("What is the capital of Canada?", ["Toronto", "Ottawa", "Vancouver", "Montreal"], "Ottawa"),
    ("What is the capital of Brazil?", ["Rio de Janeiro", "Brasilia", "Sao Paulo", "Salvador"], "Brasilia"),
    ("What is the capital of Egypt?", ["Cairo", "Alexandria", "Giza", "Luxor"], "Cairo"),
    ("What is the capital of Turkey?", ["Istanbul", "Izmir", "Ankara", "Antalya"], "Ankara"),
    ("What is the capital of Kenya?", ["Mombasa", "Nairobi", "Kisumu", "Nakuru"], "Nairobi"),
    ("What is the capital of Peru?", ["Cusco", "Arequipa", "Lima", "Trujillo"], "Lima"),
    ("What is the capital of Norway?", ["Bergen", "Oslo", "Trondheim", "Stavanger"], "Oslo"),
    ("What is the capital of Vietnam?", ["Hanoi", "Ho Chi Minh City", "Da Nang", "Hue"], "Hanoi"),
]

def analysis_payload(
    questions: list[tuple[str, str]],
    *,
    purpose: str = "Collect customer feedback",
    is_quiz: bool = False,
    is_survey: bool = False,
    key_topics: Optional[list[str]] = None,
    confidence: float = 0.8,
) -> dict[str, Any]:
    return {
        "understanding": {
            "purpose": purpose,
            "audience": "Customers",
            "keyTopics": key_topics if key_topics is not None else ["service quality"],
            "isQuiz": is_quiz,
            "isSurvey": is_survey,
        },
        "questions": [
            {"question": text, "suggestedFieldType": field_type, "rationale": "needed"}
            for text, field_type in questions
        ],
        "metadata": {"contentType": "survey", "domain": "retail", "confidence": confidence},
    }


def survey_analysis() -> dict[str, Any]:
    return analysis_payload(SURVEY_QUESTIONS, is_survey=True)


def survey_synthesis() -> dict[str, Any]:
    options = {"checkboxes": ["Web app", "Mobile app", "API"]}
    return {
        "title": "Customer Satisfaction Survey",
        "fields": [
            {
                "id": f"q{i + 1}",
                "label": text,
                "type": field_type,
                "required": i < 3,
                **({"options": options[field_type]} if field_type in options else {}),
            }
            for i, (text, field_type) in enumerate(SURVEY_QUESTIONS)
        ],
    }


def trivia_analysis(with_answers: bool = True, items: list = TRIVIA, topic: str = "general knowledge") -> dict[str, Any]:
    questions = []
    for text, options, answer in items:
        item: dict[str, Any] = {"question": text, "suggestedFieldType": "multiple-choice"}
        if with_answers:
            item.update({"options": options, "correctAnswer": answer})
        questions.append(item)
    return {
        "understanding": {"purpose": f"{topic.capitalize()} trivia", "keyTopics": [topic], "isQuiz": True},
        "questions": questions,
        "metadata": {"contentType": "quiz", "confidence": 0.9},
    }


def trivia_synthesis(with_answers: bool = True, items: list = TRIVIA, title: str = "General Knowledge Trivia") -> dict[str, Any]:
    fields = []
    for i, (text, options, answer) in enumerate(items):
        item: dict[str, Any] = {"id": f"q{i + 1}", "label": text, "type": "multiple-choice", "required": True}
        if with_answers:
            item["options"] = options
            item["quizConfig"] = {"correctAnswer": answer, "points": 1, "explanation": f"{answer} is correct."}
        fields.append(item)
    return {
        "title": title,
        "quizMode": {"enabled": True, "passingScore": 60},
        "fields": fields,
    }


def quiz_options_for(labels: list[str]) -> dict[str, Any]:
    answers = {text: (options, answer) for text, options, answer in TRIVIA}
    entries = []
    for i, label in enumerate(labels):
        options, answer = answers.get(label, (["A", "B", "C", "D"], "A"))
        entries.append({"index": i, "options": options, "correctAnswer": answer, "explanation": "Known fact."})
    return {"questions": entries}


def validation_payload(is_valid: bool, issues: Optional[list[str]] = None) -> dict[str, Any]:
    return {
        "isValid": is_valid,
        "issues": issues or [],
        "suggestions": [] if is_valid else ["Add an open feedback question"],
        "confidence": 0.85,
    }


def quiz_options_responder(messages: list[dict[str, Any]]) -> dict[str, Any]:
    """Answer a quiz-options call for whatever questions the prompt lists."""
    user = next(m["content"] for m in messages if m["role"] == "user")
    listed = json.loads(user[user.index("[") :])
    return quiz_options_for([item["question"] for item in listed])


def with_raw_numbers(payload: dict[str, Any], **literals: str) -> str:
    """Serialize ``payload`` with ``"__KEY__"`` markers swapped for raw JSON number literals.

    Lets a scripted response carry text ``json.dumps`` never emits, such as
    ``1e999`` or ``NaN``.
    """
    content = json.dumps(payload)
    for key, literal in literals.items():
        content = content.replace(f'"__{key}__"', literal)
    return content
