import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("LOG_TO_STDOUT", "0")
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "lesson_pipeline_tests", "log.txt"))
os.environ.setdefault("OPENAI_API_KEY", "test-key")


@pytest.fixture
def notes_request():
    from lessons import GenerationRequest

    return GenerationRequest.model_validate(
        {"subject": "Physics", "class": "Grade 10", "chapters": ["Motion", "Force"]}
    )


@pytest.fixture
def question_request():
    from lessons import ContentType, GenerationRequest

    return GenerationRequest.model_validate(
        {
            "subject": "Chemistry",
            "class": "Grade 11",
            "chapters": ["Atoms"],
            "content_type": ContentType.question_set,
            "question_types": {"mcq": 2, "short-answers": 1},
        }
    )


@pytest.fixture
def flashcard_request():
    from lessons import ContentType, GenerationRequest

    return GenerationRequest.model_validate(
        {
            "subject": "Biology",
            "class": "Grade 9",
            "chapters": ["Cells", "Tissues"],
            "content_type": "flashcards",
        }
    )
