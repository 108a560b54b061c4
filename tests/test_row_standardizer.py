import pytest

from ingestion.grade_ingestion.core.schemas import AssessmentType, StudentRecord
from ingestion.grade_ingestion.plugins.vsuet.row_standardizer import GradeRowStandardizer


@pytest.mark.parametrize("text, expected", [
    ("25", 25),
    (" 3 0 ", 30),
    ("25 б.", 25),
    ("-5", -5),
    ("", None),
    ("—", None),
    (None, None),
])
def test_parse_int(text, expected):
    assert GradeRowStandardizer.parse_int(text) == expected


def test_total_from_scores_counts_missing_as_zero():
    record = StudentRecord(gradebook_id="2023001", score1=25, score3=30)
    GradeRowStandardizer.standardize(record, AssessmentType.EXAM.value)

    assert record.total == 55


def test_published_total_is_never_recomputed():
    record = StudentRecord(gradebook_id="2023001", score1=10, score2=10, score3=10, total=88)
    GradeRowStandardizer.standardize(record, AssessmentType.EXAM.value)

    assert record.total == 88
    assert record.grade == "5"


def test_no_scores_and_no_total_leave_fields_empty():
    record = GradeRowStandardizer.standardize(StudentRecord(gradebook_id="2023001"), AssessmentType.EXAM.value)

    assert record.total is None
    assert record.grade is None


@pytest.mark.parametrize("total, expected", [
    (60, "зачёт"),
    (59, "незачёт"),
    (100, "зачёт"),
    (0, "незачёт"),
])
def test_pass_fail_threshold(total, expected):
    record = StudentRecord(gradebook_id="2023001", total=total)
    GradeRowStandardizer.standardize(record, AssessmentType.PASS_FAIL.value)

    assert record.grade == expected


@pytest.mark.parametrize("total, expected", [
    (85, "5"),
    (84, "4"),
    (70, "4"),
    (69, "3"),
    (55, "3"),
    (54, "2"),
])
def test_exam_thresholds(total, expected):
    record = StudentRecord(gradebook_id="2023001", total=total)
    GradeRowStandardizer.standardize(record, AssessmentType.EXAM.value)

    assert record.grade == expected


def test_non_pass_fail_types_use_numeric_scale():
    assert GradeRowStandardizer.derive_grade(90, AssessmentType.TERM_PAPER.value) == "5"
    assert GradeRowStandardizer.derive_grade(40, AssessmentType.GRADED_PASS_FAIL.value) == "2"


def test_published_grade_wins_over_threshold():
    record = StudentRecord(gradebook_id="2023001", total=40, grade="5")
    GradeRowStandardizer.standardize(record, AssessmentType.EXAM.value)

    assert record.grade == "5"


@pytest.mark.parametrize("text, expected", [
    ("отлично", "5"),
    ("Хорошо", "4"),
    ("удовлетворительно", "3"),
    ("неудовлетворительно", "2"),
    ("зачтено", "зачёт"),
    ("Не зачтено", "незачёт"),
    ("незачет", "незачёт"),
    ("неявка", "неявка"),
    ("   ", None),
])
def test_normalize_grade_words(text, expected):
    assert GradeRowStandardizer.normalize_grade(text) == expected


def test_gradebook_validity():
    assert GradeRowStandardizer.is_valid_gradebook("2023")
    assert not GradeRowStandardizer.is_valid_gradebook("123")
    assert not GradeRowStandardizer.is_valid_gradebook("")
    assert GradeRowStandardizer.is_valid_gradebook("202300112345")
    assert not GradeRowStandardizer.is_valid_gradebook("20230011234567")
