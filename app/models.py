from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text, Index, UniqueConstraint, BigInteger, ForeignKey
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base

# --- GRADE SHEETS (ВЕДОМОСТИ) ---

class StoredGradeSheet(Base):
    __tablename__ = "grade_sheets"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    # --- Identity (Upsert Key) ---
    faculty = Column(Text, nullable=False)
    group_name = Column(String(64), nullable=False)
    subject = Column(Text, nullable=False)
    academic_year = Column(String(9), nullable=False)   # "2024-2025"
    semester = Column(Integer, nullable=False)
    assessment_type = Column(String(32), nullable=False)

    # --- Descriptive ---
    course = Column(Integer, nullable=False, default=1)
    is_closed = Column(Boolean, nullable=False, default=True)
    is_demo = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    students = relationship(
        "StoredStudentRecord",
        back_populates="sheet",
        cascade="all, delete-orphan",
        order_by="StoredStudentRecord.position"
    )

    __table_args__ = (
        UniqueConstraint(
            'faculty', 'group_name', 'subject', 'academic_year', 'semester', 'assessment_type',
            name='uq_grade_sheet_identity'
        ),
        Index('idx_sheet_faculty', 'faculty'),
        Index('idx_sheet_year', 'academic_year'),
    )

class StoredStudentRecord(Base):
    __tablename__ = "student_records"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    sheet_id = Column(ForeignKey("grade_sheets.id", ondelete="CASCADE"), nullable=False)

    # Table row order inside the sheet
    position = Column(Integer, nullable=False)

    gradebook_id = Column(String(12), nullable=False)
    score1 = Column(Integer, nullable=True)
    score2 = Column(Integer, nullable=True)
    score3 = Column(Integer, nullable=True)
    score4 = Column(Integer, nullable=True)
    total = Column(Integer, nullable=True)
    grade = Column(String(16), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    sheet = relationship("StoredGradeSheet", back_populates="students")

    __table_args__ = (
        Index('idx_student_gradebook', 'gradebook_id'),
        Index('idx_student_sheet', 'sheet_id'),
    )
