from models.line import MasteryLevel
from utils.mastery import classify, count_mastered, mastery_percent


def test_classify_thresholds():
    assert classify(3, 21) == MasteryLevel.MASTERED
    assert classify(3, 20) == MasteryLevel.LEARNING
    assert classify(2, 60) == MasteryLevel.LEARNING
    assert classify(1, 1) == MasteryLevel.LEARNING
    assert classify(0, 0) == MasteryLevel.NEW
    assert classify(0, 30) == MasteryLevel.NEW


def test_mastery_percent_rounds_half_up():
    assert mastery_percent(1, 8) == 13
    assert mastery_percent(1, 3) == 33
    assert mastery_percent(2, 2) == 100


def test_mastery_percent_of_empty_text_is_zero():
    assert mastery_percent(0, 0) == 0


def test_count_mastered():
    levels = [MasteryLevel.NEW, MasteryLevel.MASTERED, MasteryLevel.LEARNING, MasteryLevel.MASTERED]
    assert count_mastered(levels) == 2
