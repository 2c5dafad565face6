"""
Initialize database schema.

Run ONCE when:
- first local setup
- new environment deployment

Optionally creates an instructor account (self sign-up only creates students):
    python -m deepreview.scripts.init_db --instructor-email a@b.edu \
        --instructor-name "Ada Lovelace" --instructor-password 'S3cret!pass'
"""

import argparse
import sys

from deepreview.database.db.models import Base
from deepreview.database.db.session import engine
from deepreview.service.auth_service import AuthError, AuthService


def init_db():
    print("🔧 Initializing database schema...")
    Base.metadata.create_all(bind=engine)
    print("✅ Database schema initialized.")


def main():
    parser = argparse.ArgumentParser(description="Create DeepReview tables")
    parser.add_argument("--instructor-email", help="Also create an instructor with this email")
    parser.add_argument("--instructor-name", default="Course Instructor")
    parser.add_argument("--instructor-password")
    args = parser.parse_args()

    init_db()

    if args.instructor_email:
        if not args.instructor_password:
            parser.error("--instructor-password is required with --instructor-email")
        try:
            user = AuthService().create_instructor(
                args.instructor_email, args.instructor_password, args.instructor_name
            )
        except AuthError as e:
            print(f"❌ Could not create instructor: {e}")
            sys.exit(1)
        print(f"👩‍🏫 Instructor created: {user.email} ({user.id})")


if __name__ == "__main__":
    main()
