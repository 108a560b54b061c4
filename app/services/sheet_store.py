import logging
from typing import Any, Dict, Iterable, List, Tuple

from sqlalchemy import select, delete, func, and_
from sqlalchemy.orm import Session

from app.models import StoredGradeSheet, StoredStudentRecord
from ingestion.grade_ingestion.core.schemas import GradeSheet, StudentRecord

logger = logging.getLogger("GradeSheetStore")

class GradeSheetStore:
    """
    The Storage Authority for grade sheets.
    POLICY:
    1. A sheet is identified by (faculty, group, subject, year, semester, assessment type).
    2. Re-ingesting a sheet replaces its students wholesale (delete -> insert), never merges.
    3. Within one batch the last sheet with a given identity wins; counts cover written rows only.
    Methods flush; `save_sheets` and `clear_all` own the commit.
    """

    @staticmethod
    def _assessment_value(sheet: GradeSheet) -> str:
        return getattr(sheet.assessment_type, "value", sheet.assessment_type)

    def deduplicate(self, sheets: Iterable[GradeSheet]) -> List[GradeSheet]:
        """One sheet per identity; a later duplicate replaces an earlier one, as a re-save would."""
        latest: Dict[tuple, GradeSheet] = {}
        for sheet in sheets:
            key = sheet.identity_key[:-1] + (self._assessment_value(sheet),)
            if key in latest:
                logger.debug(f"Duplicate sheet in batch, keeping the later one: {key}")
            latest[key] = sheet
        return list(latest.values())

    def upsert_sheet(self, db: Session, sheet: GradeSheet, is_demo: bool = False) -> int:
        assessment_type = self._assessment_value(sheet)
        existing = db.execute(
            select(StoredGradeSheet).where(
                and_(
                    StoredGradeSheet.faculty == sheet.faculty,
                    StoredGradeSheet.group_name == sheet.group_name,
                    StoredGradeSheet.subject == sheet.subject,
                    StoredGradeSheet.academic_year == sheet.academic_year,
                    StoredGradeSheet.semester == sheet.semester,
                    StoredGradeSheet.assessment_type == assessment_type,
                )
            )
        ).scalar_one_or_none()

        if existing:
            existing.course = sheet.course
            existing.is_closed = sheet.closed
            existing.is_demo = is_demo
            existing.updated_at = func.now()
            db.flush()
            return existing.id

        row = StoredGradeSheet(
            faculty=sheet.faculty,
            group_name=sheet.group_name,
            subject=sheet.subject,
            academic_year=sheet.academic_year,
            semester=sheet.semester,
            assessment_type=assessment_type,
            course=sheet.course,
            is_closed=sheet.closed,
            is_demo=is_demo,
        )
        db.add(row)
        db.flush()
        return row.id

    def delete_students(self, db: Session, sheet_id: int) -> int:
        return db.execute(
            delete(StoredStudentRecord).where(StoredStudentRecord.sheet_id == sheet_id)
        ).rowcount

    def insert_students(self, db: Session, sheet_id: int, students: Iterable[StudentRecord]) -> int:
        rows = [
            StoredStudentRecord(
                sheet_id=sheet_id,
                position=position,
                gradebook_id=s.gradebook_id,
                score1=s.score1,
                score2=s.score2,
                score3=s.score3,
                score4=s.score4,
                total=s.total,
                grade=s.grade,
            )
            for position, s in enumerate(students)
        ]
        db.add_all(rows)
        db.flush()
        return len(rows)

    def save_sheets(self, db: Session, sheets: List[GradeSheet], is_demo: bool = False) -> Tuple[int, int]:
        """Returns (sheets saved, student records written)."""
        saved, records = 0, 0
        try:
            for sheet in self.deduplicate(sheets):
                sheet_id = self.upsert_sheet(db, sheet, is_demo=is_demo)
                self.delete_students(db, sheet_id)
                records += self.insert_students(db, sheet_id, sheet.students)
                saved += 1
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"❌ Save failed after {saved} sheet(s): {e}")
            raise

        logger.info(f"✅ Saved {saved} sheets, {records} student records (demo={is_demo})")
        return saved, records

    def clear_all(self, db: Session) -> Tuple[int, int]:
        try:
            deleted_records = db.execute(delete(StoredStudentRecord)).rowcount
            deleted_sheets = db.execute(delete(StoredGradeSheet)).rowcount
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"❌ Clear failed: {e}")
            raise

        logger.warning(f"🧹 Cleared {deleted_sheets} sheets, {deleted_records} student records")
        return deleted_sheets, deleted_records

    def count_sheets(self, db: Session) -> int:
        return db.execute(select(func.count(StoredGradeSheet.id))).scalar_one()

    def count_students(self, db: Session) -> int:
        return db.execute(select(func.count(StoredStudentRecord.id))).scalar_one()

    def get_stats(self, db: Session) -> Dict[str, Any]:
        faculties = db.execute(
            select(StoredGradeSheet.faculty, func.count(StoredGradeSheet.id))
            .group_by(StoredGradeSheet.faculty)
            .order_by(StoredGradeSheet.faculty)
        ).all()
        years = db.execute(
            select(StoredGradeSheet.academic_year, func.count(StoredGradeSheet.id))
            .group_by(StoredGradeSheet.academic_year)
            .order_by(StoredGradeSheet.academic_year)
        ).all()

        return {
            "total_sheets": self.count_sheets(db),
            "total_records": self.count_students(db),
            "faculties": [{"name": name, "count": count} for name, count in faculties],
            "years": [{"year": year, "count": count} for year, count in years],
        }

    def find_by_gradebook(self, db: Session, number: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        number = (number or "").strip()
        if not number:
            return {"results": [], "total": 0, "page": page, "pages": 0}

        condition = StoredStudentRecord.gradebook_id.contains(number)
        total = db.execute(select(func.count(StoredStudentRecord.id)).where(condition)).scalar_one()

        rows = db.execute(
            select(StoredStudentRecord, StoredGradeSheet)
            .join(StoredGradeSheet, StoredStudentRecord.sheet_id == StoredGradeSheet.id)
            .where(condition)
            .order_by(StoredGradeSheet.academic_year.desc(), StoredGradeSheet.semester.desc(), StoredStudentRecord.id)
            .offset((max(page, 1) - 1) * limit)
            .limit(limit)
        ).all()

        return {
            "results": [
                {
                    "gradebook_id": r.gradebook_id,
                    "score1": r.score1,
                    "score2": r.score2,
                    "score3": r.score3,
                    "score4": r.score4,
                    "total": r.total,
                    "grade": r.grade,
                    "sheet": {
                        "id": s.id,
                        "faculty": s.faculty,
                        "group_name": s.group_name,
                        "subject": s.subject,
                        "assessment_type": s.assessment_type,
                        "academic_year": s.academic_year,
                        "semester": s.semester,
                        "is_closed": s.is_closed,
                    },
                }
                for r, s in rows
            ],
            "total": total,
            "page": page,
            "pages": -(-total // limit) if limit else 0,
        }
