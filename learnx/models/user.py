from learnx.extensions import db
from learnx.security import hash_password, verify_and_update_password
from learnx.utils import utcnow

ROLES = ("student", "instructor", "administrator", "data_analyst")


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    userid = db.Column(db.String(255), unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(50), nullable=False)  # student|instructor|administrator|data_analyst
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    enrollments = db.relationship(
        "Enrollment",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        db.CheckConstraint(
            "role IN ('student', 'instructor', 'administrator', 'data_analyst')",
            name="ck_user_role",
        ),
    )

    def set_password(self, password: str):
        self.password_hash = hash_password(password)

    def check_password(self, password: str) -> bool:
        verified, new_hash = verify_and_update_password(password, self.password_hash)
        if verified and new_hash:
            self.password_hash = new_hash
        return verified

    def __repr__(self):
        return f"<User id={self.id} userid={self.userid} role={self.role}>"
