"""Shared fixtures for the MyVocab test suite."""

import copy
import json
import random

import pytest

from myvocab.models import Dataset, Definition, UserProfile, UserWordStatus, Word
from myvocab.services import JSONRepository, VocabularyStore


def _word_dict(word_id, text, definition, category="cat_001", learned=False, review=0, correct=0):
    return {
        "id": word_id,
        "word": text,
        "phonetic": f"/{text}/",
        "partOfSpeech": "noun",
        "difficulty": "beginner",
        "frequency": 0.5,
        "categoryId": category,
        "definitions": [{"definition": definition, "example": f"An example with {text}.", "exampleTranslation": ""}],
        "synonyms": [],
        "antonyms": [],
        "tags": ["test"],
        "audioUrl": "",
        "imageUrl": "",
        "dateAdded": "2025-07-13",
        "userStatus": {
            "learned": learned,
            "starred": False,
            "reviewCount": review,
            "correctCount": correct,
            "lastReviewed": None,
            "nextReview": None,
        },
    }


@pytest.fixture
def dataset_dict():
    """A small dataset document: 5 words in 2 categories, one already learned."""
    return {
        "user": {
            "id": "user_1",
            "name": "Tester",
            "email": "tester@example.com",
            "level": "beginner",
            "totalScore": 0,
            "streak": 3,
            "settings": {"dailyGoal": 2, "notifications": True, "soundEnabled": False, "theme": "light"},
            "progress": {"wordsLearned": 1, "wordsReviewed": 0, "accuracy": 0.0, "lastStudyDate": ""},
        },
        "categories": [
            {"id": "cat_001", "name": "Business", "description": "", "color": "#FF6B6B",
             "icon": "briefcase", "wordCount": 3, "difficulty": "intermediate"},
            {"id": "cat_002", "name": "Daily life", "description": "", "color": "#4ECDC4",
             "icon": "house", "wordCount": 2, "difficulty": "beginner"},
        ],
        "words": [
            _word_dict("w1", "apple", "a red fruit"),
            _word_dict("w2", "bank", "a place for money", learned=True, review=2, correct=1),
            _word_dict("w3", "chair", "a seat with a back"),
            _word_dict("w4", "door", "an entrance", category="cat_002"),
            _word_dict("w5", "egg", "laid by hens", category="cat_002"),
        ],
    }


@pytest.fixture
def dataset(dataset_dict):
    return Dataset.from_dict(copy.deepcopy(dataset_dict))


@pytest.fixture
def template_file(tmp_path, dataset_dict):
    path = tmp_path / "bundle" / "zdata.json"
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps(dataset_dict, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def repository(tmp_path, template_file):
    repo = JSONRepository(
        data_file=str(tmp_path / "documents" / "zdata.json"),
        template_file=str(template_file),
    )
    yield repo
    repo.close()


@pytest.fixture
def store(repository):
    return VocabularyStore.load(repository)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def make_word():
    """Factory for Word objects with a single definition."""
    def factory(word_id, definition, text=None, category="cat_001", learned=False):
        return Word(
            id=word_id,
            word=text or word_id,
            category_id=category,
            definitions=(Definition(definition=definition),),
            user_status=UserWordStatus(learned=learned),
        )
    return factory


@pytest.fixture
def profile():
    return UserProfile(id="user_1", name="Tester", email="tester@example.com", level="beginner")
