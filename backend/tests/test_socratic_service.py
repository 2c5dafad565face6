import itertools

import pytest

from deepreview.model.socratic import AnswerRecord
from deepreview.service.socratic_service import (
    GRADING_FALLBACK_FEEDBACK,
    average_score,
    clamp_level,
    fallback_evaluation,
    next_level,
    normalize_grading,
    pad_to_length,
    parse_final_evaluation,
    parse_grading,
    summarize_answers,
    to_score,
)


@pytest.mark.parametrize(
    "value, expected",
    [(0, 1), (1, 1), (3, 3), (5, 5), (9, 5), (-4, 1), ("4", 4), (None, 3), ("hard", 3)],
)
def test_clamp_level(value, expected):
    assert clamp_level(value) == expected


def test_level_stays_in_range_for_any_result_sequence():
    for results in itertools.product([True, False], repeat=6):
        level = 3
        for correct in results:
            level = next_level(level, correct)
            assert 1 <= level <= 5


def test_next_level_moves_one_step():
    assert next_level(3, True) == 4
    assert next_level(3, False) == 2
    assert next_level(5, True) == 5
    assert next_level(1, False) == 1


def test_to_score_clamps_and_rejects_non_numbers():
    assert to_score(85) == 85
    assert to_score("72.6") == 73
    assert to_score(150) == 100
    assert to_score(-3) == 0
    assert to_score("n/a") == 0
    assert to_score(None) == 0
    assert to_score(float("nan")) == 0


def test_incorrect_answer_always_scores_zero():
    grading = normalize_grading({"isCorrect": False, "score": 95, "feedback": "Off topic."})
    assert grading.is_correct is False
    assert grading.score == 0
    assert grading.feedback == "Off topic."


def test_correctness_accepts_string_true():
    grading = normalize_grading({"isCorrect": "TRUE", "score": 120})
    assert grading.is_correct is True
    assert grading.score == 100
    assert grading.feedback == ""


def test_parse_grading_strips_fences():
    grading = parse_grading('```json\n{"isCorrect": true, "score": 81, "feedback": "Good."}\n```')
    assert (grading.is_correct, grading.score, grading.feedback) == (True, 81, "Good.")


def test_parse_grading_falls_back_on_garbage():
    grading = parse_grading("I think the student did fine")
    assert grading.is_correct is False
    assert grading.score == 0
    assert grading.feedback == GRADING_FALLBACK_FEEDBACK


def test_pad_to_length_zero_pads_and_truncates():
    assert pad_to_length([80, 90]) == [80, 90, 0, 0, 0]
    assert pad_to_length([1, 2, 3, 4, 5, 6, 7]) == [1, 2, 3, 4, 5]
    assert pad_to_length([]) == [0, 0, 0, 0, 0]


def test_average_is_over_five_slots():
    answers = [
        AnswerRecord(answer="a", score=80, is_correct=True, difficulty=3),
        AnswerRecord(answer="b", score=0, is_correct=False, difficulty=4),
        AnswerRecord(answer="c", score=70, is_correct=True, difficulty=3),
    ]
    scores, path, avg = summarize_answers(answers)
    assert scores == [80, 0, 70, 0, 0]
    assert path == [3, 4, 3, 0, 0]
    assert avg == 30.0


def test_average_score_rounds_to_two_places():
    assert average_score([33, 33, 34, 0, 0]) == 20.0
    assert average_score([1, 1, 1]) == 1.0
    assert average_score([10, 0, 0]) == 3.33
    assert average_score([]) == 0.0


def test_parse_final_evaluation_limits_lists():
    text = """```json
    {
      "comprehensionScore": 88.4,
      "criticalThinkingScore": "71",
      "qualityScore": 130,
      "strengths": ["s1", "s2", "s3", "s4", "s5", "s6", "s7"],
      "weaknesses": ["w1"],
      "recommendations": ["r1", "r2", "r3", "r4", "r5", "r6", "r7", "r8", "r9"],
      "summaryText": "Solid grasp of the method."
    }
    ```"""
    evaluation = parse_final_evaluation(text)
    assert evaluation.comprehension_score == 88
    assert evaluation.critical_thinking_score == 71
    assert evaluation.quality_score == 100
    assert len(evaluation.strengths) == 6
    assert evaluation.weaknesses == ["w1"]
    assert len(evaluation.recommendations) == 8
    assert evaluation.summary_text == "Solid grasp of the method."
    assert evaluation.is_fallback is False


def test_parse_final_evaluation_defaults_missing_fields():
    evaluation = parse_final_evaluation('{"strengths": "not a list"}')
    assert evaluation.strengths == []
    assert evaluation.comprehension_score == 0
    assert evaluation.summary_text == "Summary not available."


def test_parse_final_evaluation_rejects_non_json():
    with pytest.raises(ValueError):
        parse_final_evaluation("Great job overall!")


def test_fallback_evaluation_values():
    evaluation = fallback_evaluation()
    assert (
        evaluation.comprehension_score,
        evaluation.critical_thinking_score,
        evaluation.quality_score,
    ) == (70, 68, 72)
    assert evaluation.is_fallback is True
    assert evaluation.strengths == ["Completed the Socratic flow"]
