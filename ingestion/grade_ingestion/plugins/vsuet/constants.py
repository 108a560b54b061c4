import re

# --- 1. COLUMN ROLES ---
# Substring match against lower-cased header text. Roles are tried in order;
# a header takes the first role it matches and a role keeps its first header.
ROLE_GRADEBOOK = "gradebook"
ROLE_SCORE1 = "score1"
ROLE_SCORE2 = "score2"
ROLE_SCORE3 = "score3"
ROLE_TOTAL = "total"
ROLE_GRADE = "grade"

HEADER_ALIASES = [
    (ROLE_GRADEBOOK, ["зачётк", "зачетк", "номер", "№"]),
    (ROLE_SCORE1, ["кт1", "кт-1"]),
    (ROLE_SCORE2, ["кт2", "кт-2"]),
    (ROLE_SCORE3, ["кт3", "кт-3"]),
    (ROLE_TOTAL, ["сумм", "всего"]),
    (ROLE_GRADE, ["оценк"]),
]

# Exact-match aliases, checked before substrings
HEADER_EXACT_ALIASES = {
    "итого": ROLE_TOTAL,
}

# Weak aliases, consulted only when no primary alias matched the header
HEADER_FALLBACK_ALIASES = [
    (ROLE_SCORE3, ["итог"]),
]

SCORE_ROLES = (ROLE_SCORE1, ROLE_SCORE2, ROLE_SCORE3, ROLE_TOTAL, ROLE_GRADE)

# --- 2. GRADE SHEET GATE ---
SHEET_TEXT_MARKERS = ["зачёт", "зачет", "номер"]
SHEET_HEADER_MARKERS = ["кт", "балл", "оценк"]

# --- 3. CONTEXT PATTERNS ---
P_SUBJECT = re.compile(r'(?:предмет|дисциплина)[:\s]*([^\n,;]+)', re.IGNORECASE)
P_FACULTY = re.compile(r'(?:факультет|институт)[:\s]*([^\n,;]+)', re.IGNORECASE)
P_GROUP = re.compile(r'групп[аы][:\s]*([^\n,;]+)', re.IGNORECASE)

P_URL_YEAR = re.compile(r'year=(\d{4}-\d{4})')
P_URL_SEMESTER = re.compile(r'semester=(\d)')

# --- 4. ASSESSMENT KEYWORDS ---
# Headings carry the subject name too ("Дифференциальные уравнения"), so the
# graded pass/fail marker only counts when it sits next to the pass/fail word.
ASSESSMENT_PATTERNS = [
    (re.compile(r"диф\w*\.?\s*-?\s*зач[её]т"), "GRADED_PASS_FAIL"),
    (re.compile(r"экзамен"), "EXAM"),
    (re.compile(r"курсов\w*\s+(?:работ|проект)"), "TERM_PAPER"),
    (re.compile(r"зач[её]т"), "PASS_FAIL"),
]

# --- 5. CLOSED STATUS ---
# An explicit "не закрыта" wins over every other signal.
P_OPEN = re.compile(r"\bне\s*закрыта\b")
P_CLOSED = re.compile(r"(?<!не )\b(?:закрыта|итого)\b")
EDITABLE_TAGS = ["input", "select", "textarea"]

# --- 6. GRADE THRESHOLDS (inclusive lower bounds, descending) ---
PASS_THRESHOLD = 60
GRADE_THRESHOLDS = [
    (85, "5"),
    (70, "4"),
    (55, "3"),
]
FAILING_GRADE = "2"

GRADE_PASS = "зачёт"
GRADE_FAIL = "незачёт"

# Word forms seen in published sheets. Negative forms come first.
GRADE_WORDS = [
    ("неудовл", "2"),
    ("удовл", "3"),
    ("хорош", "4"),
    ("отлич", "5"),
    ("не зачт", GRADE_FAIL),
    ("незачт", GRADE_FAIL),
    ("незачет", GRADE_FAIL),
    ("незачёт", GRADE_FAIL),
    ("зачт", GRADE_PASS),
    ("зачет", GRADE_PASS),
    ("зачёт", GRADE_PASS),
]

# --- 7. GRADEBOOK SHAPE ---
MIN_GRADEBOOK_LENGTH = 4
MAX_GRADEBOOK_LENGTH = 12
FALLBACK_GRADEBOOK = re.compile(r'^\d{6,12}$')
