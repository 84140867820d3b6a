from sqlalchemy import (
	Column, String, Numeric, DateTime, ForeignKey, UniqueConstraint,
	PrimaryKeyConstraint, func
)

from coin_ledger.core.database import Base
from coin_ledger.utils.common import utc_now


class Course(Base):
	"""Локальна копія курсу з каталогу (id, назва, ціна)."""
	__tablename__ = "courses"

	id = Column(String, primary_key=True)
	title = Column(String, nullable=False)
	price = Column(Numeric(10, 2), nullable=False, default=0)
	updated_at = Column(
		DateTime(timezone=True), default=utc_now, onupdate=utc_now,
		server_default=func.now()
	)


class Enrollment(Base):
	__tablename__ = "enrollments"
	__table_args__ = (
		UniqueConstraint("user_id", "course_id", name="uq_enrollments_user_course"),
	)

	id = Column(String, primary_key=True)
	user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
	course_id = Column(String, ForeignKey("courses.id"), nullable=False)
	payment_method = Column(String, nullable=False, default="coins")
	created_at = Column(
		DateTime(timezone=True), default=utc_now, server_default=func.now()
	)


class CourseCompletion(Base):
	__tablename__ = "course_completions"
	__table_args__ = (
		PrimaryKeyConstraint("user_id", "course_id", name="pk_course_completions"),
	)

	user_id = Column(String, ForeignKey("users.id"), nullable=False)
	course_id = Column(String, ForeignKey("courses.id"), nullable=False)
	completed_at = Column(
		DateTime(timezone=True), default=utc_now, server_default=func.now()
	)
