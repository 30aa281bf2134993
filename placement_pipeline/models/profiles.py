"""
Directory tables for companies and students.

Profile CRUD lives in the profile service; the pipeline only reads
these rows to check ownership and to join display fields
(name, department, cgpa) into round views.
"""

from sqlalchemy import Column, DateTime, Float, Integer, String

from placement_pipeline.models.base import Base
from placement_pipeline.utils.clock import utcnow


class Company(Base):
    __tablename__ = "companies"

    company_id = Column(Integer, primary_key=True, autoincrement=True)
    company_name = Column(String(200), nullable=False)
    industry = Column(String(100))
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Company {self.company_id} {self.company_name}>"


class Student(Base):
    __tablename__ = "students"

    student_id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(100), nullable=False)
    email = Column(String(255))
    department = Column(String(100), index=True)
    graduation_year = Column(Integer)
    cgpa = Column(Float)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Student {self.student_id} {self.full_name}>"
