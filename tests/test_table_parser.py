from datetime import date

from conftest import page_html, table_html
from ingestion.grade_ingestion.core.schemas import ExtractionContext, StudentRecord
from ingestion.grade_ingestion.plugins.vsuet.table_parser import GradeTableParser

CONTEXT = ExtractionContext(faculty="УИТС", group_name="ИС-21", academic_year="2024-2025", semester=1)


def parse(html, context=CONTEXT):
    return GradeTableParser(html, context, today=date(2025, 3, 1)).parse()


def test_single_table_scenario():
    html = page_html(table_html(["№", "КТ1", "КТ2", "КТ3", "Оценка"], [["2023001", "25", "20", "30", "5"]]))

    sheets = parse(html)

    assert len(sheets) == 1
    assert sheets[0].students == [
        StudentRecord(gradebook_id="2023001", score1=25, score2=20, score3=30, total=75, grade="5")
    ]
    assert sheets[0].assessment_type == "экзамен"
    assert sheets[0].faculty == "УИТС"
    assert sheets[0].group_name == "ИС-21"


def test_extraction_is_idempotent():
    html = page_html(
        "<h2>Экзамен. Предмет: Базы данных</h2>",
        table_html(["№", "КТ1", "КТ2", "КТ3", "Оценка"], [["2023001", "25", "20", "30", ""], ["2023002", "10", "", "5", ""]]),
        "<h2>Зачёт. Предмет: История</h2>",
        table_html(["Номер зачётки", "Итого"], [["2023001", "61"], ["2023002", "12"]]),
    )

    first, second = parse(html), parse(html)

    assert first == second
    assert repr(first) == repr(second)
    assert [s.subject for s in first] == ["Базы данных", "История"]


def test_short_gradebook_discards_row():
    html = page_html(table_html(["№", "КТ1", "КТ2"], [["123", "10", "10"]]))

    assert parse(html) == []


def test_merged_gradebook_numbers_discard_row():
    html = page_html(table_html(["№", "КТ1", "КТ2"], [["2023001 / 1234567", "25", "10"]]))

    assert parse(html) == []


def test_overlong_gradebook_column_falls_back_to_separate_number():
    html = page_html(table_html(["№", "Шифр", "КТ1"], [["2023001 / 1234567", "2023005", "25"]]))

    assert [s.gradebook_id for s in parse(html)[0].students] == ["2023005"]


def test_pass_fail_heading_with_differential_subject():
    html = page_html(
        "<h2>Зачёт. Дисциплина: Дифференциальные уравнения</h2>",
        table_html(["№", "КТ1", "КТ2", "КТ3"], [["2023001", "25", "20", "30"], ["2023002", "10", "10", "10"]]),
    )

    sheet = parse(html)[0]

    assert sheet.subject == "Дифференциальные уравнения"
    assert sheet.assessment_type == "зачёт"
    assert [s.grade for s in sheet.students] == ["зачёт", "незачёт"]


def test_gradebook_found_in_unclassified_cell():
    html = page_html(table_html(["ФИО", "Шифр", "КТ1", "КТ2"], [["Иванов И.И.", "1234567", "10", "20"]]))

    students = parse(html)[0].students

    assert students == [
        StudentRecord(gradebook_id="1234567", score1=10, score2=20, total=30, grade="незачёт")
    ]


def test_row_counter_in_number_column_falls_back_to_gradebook_cell():
    html = page_html(table_html(["№", "Зачётка", "КТ1", "Оценка"], [["1", "2023001", "25", "3"]]))

    record = parse(html)[0].students[0]

    assert record.gradebook_id == "2023001"
    assert record.score1 == 25
    assert record.grade == "3"


def test_total_column_only_is_taken_verbatim():
    html = page_html(table_html(["№ зачётки", "Итого", "Оценка"], [["2023001", "75", ""]]))

    sheet = parse(html)[0]
    record = sheet.students[0]

    assert record.total == 75
    assert (record.score1, record.score2, record.score3) == (None, None, None)
    assert record.grade == "4"
    assert sheet.closed is True


def test_positional_scores_when_checkpoints_are_unlabelled():
    html = page_html(table_html(["Номер зачётки", "Результаты"], [["2023001", "20", "25", "30"]]))

    record = parse(html)[0].students[0]

    assert (record.score1, record.score2, record.score3) == (20, 25, 30)
    assert record.total == 75
    assert record.grade == "зачёт"


def test_word_grades_are_normalized():
    html = page_html(table_html(["№", "КТ1", "Оценка"], [["2023001", "30", "отлично"], ["2023002", "30", "не зачтено"]]))

    grades = [s.grade for s in parse(html)[0].students]

    assert grades == ["5", "незачёт"]


def test_non_grade_and_layout_tables_are_skipped():
    navigation = table_html(["Главная", "Новости"], [["Расписание", "Рейтинг"]])
    grades = table_html(["№", "КТ1", "КТ2", "КТ3"], [["2023001", "10", "10", "10"]])
    wrapper = f"<table><tr><td>{grades}</td></tr><tr><td>№ зачётки</td></tr></table>"

    sheets = parse(page_html(navigation, wrapper))

    assert len(sheets) == 1
    assert sheets[0].students[0].gradebook_id == "2023001"


def test_tables_without_valid_rows_produce_no_sheet():
    html = page_html(
        table_html(["№", "КТ1"], []),
        table_html(["№", "КТ1"], [["", ""], ["only-one-cell"]]),
    )

    assert parse(html) == []


def test_empty_html_yields_nothing():
    assert parse("") == []
    assert parse("<html><body><p>Ведомости не опубликованы</p></body></html>") == []


def test_editable_table_is_open():
    html = page_html(table_html(["№", "КТ1", "КТ2"], [["2023001", '<input value="10"/>', "12"]]))

    assert parse(html)[0].closed is False
