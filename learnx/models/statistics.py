from learnx.extensions import db


class CourseStatistics(db.Model):
    """Per-course enrollment aggregate. Derived data: only ever written by recompute."""

    __tablename__ = "statistics"

    course_id = db.Column(db.Integer, db.ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True)
    total_enrollments = db.Column(db.Integer, nullable=False, default=0)
    active_enrollments = db.Column(db.Integer, nullable=False, default=0)
    completion_rate = db.Column(db.Float, nullable=False, default=0)
    avg_completion_time = db.Column(db.Float, nullable=False, default=0)

    course = db.relationship("Course", back_populates="statistics")

    __table_args__ = (
        db.CheckConstraint("completion_rate >= 0 AND completion_rate <= 100", name="ck_stats_completion_rate"),
    )
