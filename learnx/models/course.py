from learnx.extensions import db
from learnx.utils import utcnow

COURSE_STATUSES = ("pending", "approved")


class Course(db.Model):
    __tablename__ = "courses"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    instructor = db.Column(db.String(255), nullable=True)
    # Seeded/legacy courses carry no owning account.
    instructor_userid = db.Column(db.String(255), nullable=True, index=True)
    category = db.Column(db.String(255), nullable=True)
    university = db.Column(db.String(255), nullable=True)
    level = db.Column(db.String(50), nullable=True)
    fee = db.Column(db.Float, nullable=True)
    original_price = db.Column(db.Float, nullable=True)
    duration = db.Column(db.String(100), nullable=True)
    rating = db.Column(db.Float, nullable=True, default=0)
    students = db.Column(db.Integer, nullable=True, default=0)
    icon = db.Column(db.String(10), nullable=True)
    bestseller = db.Column(db.Boolean, nullable=False, default=False)
    featured = db.Column(db.Boolean, nullable=False, default=False)
    trending = db.Column(db.Boolean, nullable=False, default=False)
    is_new = db.Column(db.Boolean, nullable=False, default=False)
    status = db.Column(db.String(20), nullable=True, default="approved")  # pending|approved
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    topics = db.relationship(
        "CourseTopic",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CourseTopic.order_index",
    )
    contents = db.relationship(
        "CourseContent",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CourseContent.order_index",
    )
    enrollments = db.relationship(
        "Enrollment",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    statistics = db.relationship(
        "CourseStatistics",
        back_populates="course",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        db.Index("ix_course_status", "status"),
        db.Index("ix_course_created_at", "created_at"),
    )

    @property
    def is_approved(self) -> bool:
        """Rows predating the approval workflow have no status and count as approved."""
        return self.status is None or self.status == "approved"

    def __repr__(self):
        return f"<Course id={self.id} {self.name!r} status={self.status}>"


class CourseTopic(db.Model):
    __tablename__ = "course_topics"

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    order_index = db.Column(db.Integer, nullable=False, default=0)

    course = db.relationship("Course", back_populates="topics")


class CourseContent(db.Model):
    __tablename__ = "course_contents"

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    content_type = db.Column(db.String(20), nullable=False)  # video|note
    url = db.Column(db.Text, nullable=True)
    note_text = db.Column(db.Text, nullable=True)
    order_index = db.Column(db.Integer, nullable=False, default=0)

    course = db.relationship("Course", back_populates="contents")
