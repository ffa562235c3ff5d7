from learnx.extensions import db
from learnx.utils import utcnow

ACTIVE = "active"
COMPLETED = "completed"
STATUS_MAX_LENGTH = 20


class Enrollment(db.Model):
    __tablename__ = "enrollments"

    id = db.Column(db.Integer, primary_key=True)
    userid = db.Column(db.String(255), db.ForeignKey("users.userid", ondelete="CASCADE"), nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    progress = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(STATUS_MAX_LENGTH), nullable=False, default=ACTIVE)  # active|completed
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    user = db.relationship("User", back_populates="enrollments")
    course = db.relationship("Course", back_populates="enrollments")

    __table_args__ = (
        db.UniqueConstraint("userid", "course_id", name="uq_enrollment_user_course"),
        db.CheckConstraint("progress >= 0 AND progress <= 100", name="ck_enrollment_progress_range"),
        db.Index("ix_enrollment_course_id", "course_id"),
        db.Index("ix_enrollment_created_at", "created_at"),
    )

    def __repr__(self):
        return f"<Enrollment {self.userid}@{self.course_id} {self.status} {self.progress}%>"
