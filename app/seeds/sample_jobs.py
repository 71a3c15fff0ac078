"""Seed sample job postings for local development."""

from app import db
from app.models import JobPosting


SAMPLE_JOBS = [
    {
        "employer_id": 1,
        "title": "Backend Engineer",
        "company": "Acme Logistics",
        "location": "Remote",
    },
    {
        "employer_id": 1,
        "title": "Data Analyst",
        "company": "Acme Logistics",
        "location": "Berlin",
    },
    {
        "employer_id": 2,
        "title": "Product Designer",
        "company": "Northwind Studio",
        "location": "Lisbon",
    },
]


def seed_sample_jobs():
    """
    Seed sample job postings.

    Skips a job if the same employer already has a posting with that title
    (idempotent).
    """
    print("Seeding sample jobs...")

    created_count = 0
    skipped_count = 0

    for job_data in SAMPLE_JOBS:
        existing_job = JobPosting.query.filter_by(
            employer_id=job_data["employer_id"], title=job_data["title"]
        ).first()

        if existing_job:
            print(f"  ⏭️  Skipped: {job_data['title']} (already exists)")
            skipped_count += 1
            continue

        db.session.add(JobPosting(**job_data))
        created_count += 1
        print(f"  ✅ Created: {job_data['title']} at {job_data['company']}")

    db.session.commit()

    print(f"\n✅ Sample jobs seeded: {created_count} created, {skipped_count} skipped")
    return created_count, skipped_count


if __name__ == "__main__":
    from app import create_app

    app = create_app()
    with app.app_context():
        seed_sample_jobs()
