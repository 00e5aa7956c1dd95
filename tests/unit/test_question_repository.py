"""
Unit tests for the question repository and question content models.
"""

import json

import pytest

from config import DEFAULT_QUESTION_BANK
from quiz_engine.core.errors import ContentError, QuestionNotFound, ScopeNotFound
from quiz_engine.quiz.models import Difficulty, Option, Question
from quiz_engine.quiz.repository import GENERIC_REMEDIAL_SCOPE, InMemoryQuestionRepository


class TestQueries:
    def test_find_by_scope_keeps_authored_order(self, repository):
        questions = repository.find_by_scope("calc")
        assert [q.id for q in questions] == ["c1", "c2", "c3", "c4"]

    def test_find_by_scope_unknown_scope(self, repository):
        with pytest.raises(ScopeNotFound):
            repository.find_by_scope("nope")

    def test_find_by_scope_returns_fresh_list(self, repository):
        repository.find_by_scope("calc").clear()
        assert len(repository.find_by_scope("calc")) == 4

    def test_find_by_difficulty(self, repository):
        easy = repository.find_by_difficulty("calc", Difficulty.EASY)
        assert [q.id for q in easy] == ["c1", "c3"]

    def test_find_by_difficulty_accepts_string(self, repository):
        assert [q.id for q in repository.find_by_difficulty("drill", "hard")] == ["d4"]

    def test_find_by_difficulty_unknown_scope(self, repository):
        with pytest.raises(ScopeNotFound):
            repository.find_by_difficulty("nope", Difficulty.EASY)

    def test_find_related_prefers_curated_bank(self, repository):
        related = repository.find_related("c2", Difficulty.STANDARD)
        assert [q.id for q in related] == ["r-c2-1", "r-c2-2"]

    def test_find_related_falls_back_to_generic(self, repository):
        related = repository.find_related("c2", Difficulty.EASY)
        assert [q.id for q in related] == ["g-e1", "g-e2"]

    def test_find_related_empty_when_no_bank(self, repository):
        assert repository.find_related("c1", Difficulty.HARD) == []

    def test_get_question(self, repository):
        assert repository.get_question("r-c2-1").difficulty == Difficulty.STANDARD

    def test_get_question_unknown(self, repository):
        with pytest.raises(QuestionNotFound):
            repository.get_question("missing")

    def test_list_scopes(self, repository):
        scopes = {scope.id: scope for scope in repository.list_scopes()}

        assert scopes["calc"].title == "Calculus basics"
        assert scopes["calc"].question_count == 4
        assert scopes["calc"].difficulties == {"easy": 2, "standard": 1, "hard": 1}
        assert scopes["empty"].question_count == 0


class TestQuestionModel:
    def test_multiple_choice_requires_exactly_one_correct_option(self):
        with pytest.raises(ValueError):
            Question(
                id="bad",
                scope_id="s",
                difficulty="easy",
                body="?",
                options=(
                    Option(id="a", label="A", text="1", is_correct=True),
                    Option(id="b", label="B", text="2", is_correct=True),
                ),
            )

    def test_instantiate_reidentifies_question_and_options(self, repository):
        original = repository.get_question("c1")
        instance = original.instantiate()

        assert instance.id != original.id
        assert instance.id.startswith("qi-")
        assert instance.original_question_id == "c1"
        assert instance.is_instance
        assert {o.id for o in instance.options}.isdisjoint({o.id for o in original.options})
        assert [o.original_option_id for o in instance.options] == [o.id for o in original.options]
        assert instance.correct_option().original_option_id == original.correct_option().id

    def test_instance_of_instance_keeps_the_original_ids(self, repository):
        twice = repository.get_question("c1").instantiate().instantiate()

        assert twice.original_question_id == "c1"
        assert twice.options[0].original_option_id == "c1-a"

    def test_two_instances_never_share_ids(self, repository):
        original = repository.get_question("c1")
        first, second = original.instantiate(), original.instantiate()

        assert first.id != second.id
        assert {o.id for o in first.options}.isdisjoint({o.id for o in second.options})

    def test_public_view_hides_correctness(self, repository):
        view = repository.get_question("c1").public_view()

        assert view["id"] == "c1"
        assert all(set(option) == {"id", "label", "text"} for option in view["options"])
        assert "accepted_answers" not in view


class TestLoading:
    @pytest.fixture
    def bank(self):
        return {
            "scopes": [
                {
                    "id": "s1",
                    "title": "Scope one",
                    "questions": [
                        {
                            "id": "s1-q1",
                            "difficulty": "easy",
                            "body": "1 + 1?",
                            "options": [
                                {"id": "a", "label": "A", "text": "1"},
                                {"id": "b", "label": "B", "text": "2", "is_correct": True},
                            ],
                        }
                    ],
                }
            ],
            "remedial": {
                "curated": {
                    "s1-q1": {
                        "standard": [
                            {
                                "id": "s1-r1",
                                "body": "2 + 2?",
                                "options": [
                                    {"id": "c", "label": "A", "text": "4", "is_correct": True},
                                    {"id": "d", "label": "B", "text": "5"},
                                ],
                            }
                        ]
                    }
                },
                "generic": {
                    "hard": [
                        {
                            "id": "g1",
                            "question_type": "open_ended",
                            "body": "Name the operation.",
                            "accepted_answers": ["addition"],
                        }
                    ]
                },
            },
        }

    def test_from_dict_fills_scope_and_difficulty(self, bank):
        repo = InMemoryQuestionRepository.from_dict(bank)

        remedial = repo.get_question("s1-r1")
        assert remedial.scope_id == "s1"
        assert remedial.difficulty == Difficulty.STANDARD

        generic = repo.get_question("g1")
        assert generic.scope_id == GENERIC_REMEDIAL_SCOPE
        assert generic.difficulty == Difficulty.HARD

    def test_invalid_content_raises_content_error(self, bank):
        bank["scopes"][0]["questions"][0]["options"][0]["is_correct"] = True

        with pytest.raises(ContentError):
            InMemoryQuestionRepository.from_dict(bank)

    def test_duplicate_ids_raise_content_error(self, bank):
        duplicate = dict(bank["scopes"][0]["questions"][0], body="different body")
        bank["scopes"].append({"id": "s2", "questions": [duplicate]})

        with pytest.raises(ContentError):
            InMemoryQuestionRepository.from_dict(bank)

    def test_repeated_question_in_a_scope_raises_content_error(self, bank):
        questions = bank["scopes"][0]["questions"]
        questions.append(dict(questions[0]))

        with pytest.raises(ContentError):
            InMemoryQuestionRepository.from_dict(bank)

    def test_repeated_question_object_in_a_scope_raises_content_error(self, mcq):
        question = mcq("q1")

        with pytest.raises(ContentError):
            InMemoryQuestionRepository({"s": [question, question]})

    def test_from_file(self, bank, tmp_path):
        path = tmp_path / "bank.json"
        path.write_text(json.dumps(bank), encoding="utf-8")

        repo = InMemoryQuestionRepository.from_file(path)
        assert [s.id for s in repo.list_scopes()] == ["s1"]

    def test_from_file_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            InMemoryQuestionRepository.from_file(tmp_path / "missing.json")

    def test_packaged_bank_loads(self):
        repo = InMemoryQuestionRepository.from_file(DEFAULT_QUESTION_BANK)

        questions = repo.find_by_scope("integrals-101")
        assert [q.id for q in questions][:3] == ["q-demo-1", "q-demo-2", "q-demo-3"]
        assert repo.find_related("q-demo-3", Difficulty.EASY)[0].id.startswith("r-q3-easy")
        assert repo.find_generic(Difficulty.HARD)
