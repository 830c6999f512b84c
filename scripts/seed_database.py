# scripts/seed_database.py
"""
Database seeding script.
Populates the database with sample users, organizations, opportunities,
applications and messages for development.
"""

import argparse
import os
import random
import sys
from datetime import timedelta
from getpass import getpass

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from faker import Faker
from werkzeug.security import generate_password_hash

from app import app
from flask_app.models import (
    ApplicationStatus,
    Badge,
    Message,
    Notification,
    OpportunityStatus,
    Organization,
    User,
    UserBadge,
    UserRole,
    VolunteerApplication,
    VolunteerOpportunity,
    db,
)
from flask_app.models.base import utcnow
from flask_app.services.badge_service import BadgeService
from flask_app.services.message_service import MessageService

fake = Faker()

# Statistics tracking
stats = {
    "admin_users": 0,
    "organizations": 0,
    "volunteers": 0,
    "opportunities": 0,
    "applications": 0,
    "messages": 0,
    "badges": 0,
    "errors": [],
}


def clear_database():
    """Clear all seeded data from the database"""
    print("Clearing existing data...")
    try:
        # Delete in reverse order of dependencies
        UserBadge.query.delete()
        Notification.query.delete()
        Message.query.delete()
        VolunteerApplication.query.delete()
        VolunteerOpportunity.query.delete()
        Organization.query.delete()
        User.query.filter(User.role != UserRole.ADMINISTRATOR).delete()
        db.session.commit()
        print("✅ Database cleared")
    except Exception as e:
        db.session.rollback()
        print(f"❌ Error clearing database: {str(e)}")
        sys.exit(1)


def seed_admin_user(email="admin@example.com", password=None, dry_run=False):
    """Create the administrator account"""
    print("\n📝 Seeding admin user...")

    if dry_run:
        print(f"  [DRY RUN] Would create admin user: {email}")
        return None

    existing = User.find_by_email(email)
    if existing:
        print(f"  ⏭️  Admin user '{email}' already exists, skipping")
        return existing

    admin_user, error = User.safe_create(
        email=email,
        first_name="Admin",
        last_name="User",
        password_hash=generate_password_hash(password or "admin"),
        role=UserRole.ADMINISTRATOR,
    )
    if error:
        stats["errors"].append(f"Admin user: {error}")
        print(f"  ❌ Error creating admin user: {error}")
        return None

    stats["admin_users"] += 1
    print(f"  ✅ Created admin user: {email}")
    return admin_user


def _create_user(role):
    user, error = User.safe_create(
        email=fake.unique.email().lower(),
        first_name=fake.first_name(),
        last_name=fake.last_name(),
        phone=fake.numerify("555-####"),
        password_hash=generate_password_hash("password123"),
        role=role,
    )
    if error:
        stats["errors"].append(f"User: {error}")
    return user


def seed_organizations(count=3, dry_run=False):
    """Create organization owners, their profiles and a few opportunities each"""
    print("\n📝 Seeding organizations and opportunities...")
    if dry_run:
        print(f"  [DRY RUN] Would create {count} organizations")
        return []

    organizations = []
    for _ in range(count):
        owner = _create_user(UserRole.ORGANIZATION)
        if owner is None:
            continue
        organization, error = Organization.safe_create(
            user_id=owner.id,
            name=fake.company(),
            description=fake.catch_phrase(),
            website=fake.url(),
            phone=fake.numerify("555-####"),
            address=fake.address().replace("\n", ", "),
            is_verified=True,
        )
        if error:
            stats["errors"].append(f"Organization: {error}")
            continue
        organizations.append(organization)
        stats["organizations"] += 1

        for _ in range(random.randint(2, 4)):
            start = utcnow() + timedelta(days=random.randint(3, 60))
            opportunity, error = VolunteerOpportunity.safe_create(
                organization_id=organization.id,
                title=fake.bs().capitalize(),
                description=fake.paragraph(nb_sentences=3),
                location=fake.city(),
                start_date=start,
                end_date=start + timedelta(hours=4),
                duration_hours=4,
                volunteers_required=random.randint(3, 15),
                status=OpportunityStatus.ACTIVE,
            )
            if error:
                stats["errors"].append(f"Opportunity: {error}")
                continue
            stats["opportunities"] += 1

    print(f"  ✅ Created {stats['organizations']} organizations, {stats['opportunities']} opportunities")
    return organizations


def seed_volunteers(count=10, dry_run=False):
    """Create volunteers, applications and a handful of messages"""
    print("\n📝 Seeding volunteers, applications and messages...")
    if dry_run:
        print(f"  [DRY RUN] Would create {count} volunteers")
        return []

    opportunities = VolunteerOpportunity.query.all()
    volunteers = []
    for _ in range(count):
        volunteer = _create_user(UserRole.VOLUNTEER)
        if volunteer is None:
            continue
        volunteers.append(volunteer)
        stats["volunteers"] += 1

        for opportunity in random.sample(opportunities, k=min(len(opportunities), random.randint(0, 3))):
            status = random.choice(list(ApplicationStatus))
            if status in (ApplicationStatus.APPROVED, ApplicationStatus.COMPLETED):
                if opportunity.has_capacity:
                    opportunity.volunteers_enrolled += 1
                else:
                    status = ApplicationStatus.PENDING
            application = VolunteerApplication(
                user_id=volunteer.id,
                opportunity_id=opportunity.id,
                message=fake.sentence(),
                status=status,
                applied_at=utcnow() - timedelta(days=random.randint(1, 30)),
                responded_at=None if status == ApplicationStatus.PENDING else utcnow(),
            )
            db.session.add(application)
            stats["applications"] += 1
        db.session.commit()

        if BadgeService.check_automatic(volunteer.id):
            stats["badges"] += 1

        if opportunities and random.random() < 0.5:
            owner_id = random.choice(opportunities).organization.user_id
            MessageService.send(volunteer.id, owner_id, fake.sentence(nb_words=12))
            stats["messages"] += 1

    print(f"  ✅ Created {stats['volunteers']} volunteers, {stats['applications']} applications")
    return volunteers


def seed_database(clear=False, admin_email="admin@example.com", admin_password=None, dry_run=False):
    """Main function to seed the database"""
    print("=" * 60)
    print("Database Seeding Script")
    print("=" * 60)

    if dry_run:
        print("\n⚠️  DRY RUN MODE - No changes will be made to the database\n")

    with app.app_context():
        db.create_all()
        if clear and not dry_run:
            clear_database()

        if not dry_run and not Badge.query.first():
            BadgeService.seed_default_badges()

        seed_admin_user(admin_email, admin_password, dry_run)
        seed_organizations(dry_run=dry_run)
        seed_volunteers(dry_run=dry_run)

        # Print summary
        print("\n" + "=" * 60)
        print("Seeding Summary")
        print("=" * 60)
        print(f"Admin Users: {stats['admin_users']}")
        print(f"Organizations: {stats['organizations']}")
        print(f"Opportunities: {stats['opportunities']}")
        print(f"Volunteers: {stats['volunteers']}")
        print(f"Applications: {stats['applications']}")
        print(f"Messages: {stats['messages']}")
        print(f"Volunteers with new badges: {stats['badges']}")

        if stats["errors"]:
            print(f"\n⚠️  Errors encountered: {len(stats['errors'])}")
            for error in stats["errors"][:10]:
                print(f"  - {error}")
            if len(stats["errors"]) > 10:
                print(f"  ... and {len(stats['errors']) - 10} more errors")
        else:
            print("\n✅ Seeding completed successfully!")

        if not dry_run:
            print("\nDefault credentials:")
            print(f"  Admin: {admin_email} / {admin_password or 'admin'}")
            print("  Other users: <email> / password123")


def main():
    """Command-line interface"""
    parser = argparse.ArgumentParser(description="Seed the database with sample data")
    parser.add_argument("--clear", action="store_true", help="Clear existing data before seeding")
    parser.add_argument(
        "--admin-email",
        default="admin@example.com",
        help="Admin email (default: admin@example.com)",
    )
    parser.add_argument("--admin-password", help="Admin password (will prompt if not provided)")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be created without actually creating",
    )
    args = parser.parse_args()

    admin_password = args.admin_password
    if not admin_password and not args.dry_run:
        admin_password = getpass("Enter admin password (or press Enter for 'admin'): ") or "admin"

    seed_database(
        clear=args.clear,
        admin_email=args.admin_email,
        admin_password=admin_password,
        dry_run=args.dry_run,
    )


if __name__ == "__main__":
    main()
