"""
Database initialization script.

Creates all tables and optionally inserts sample vendors with performance
data so matching and chat can be tried out locally.

Usage:
    python scripts/init_db.py [--seed]
"""
import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import inspect

from vira.db.models import Base, Vendor, VendorPerformance
from vira.db.session import get_engine, get_session_factory, session_scope


# (id, name, categories, skills, location, contact, email, pricing, rate, availability,
#  avg rating, recommendation %, rated projects)
SAMPLE_VENDORS = [
    ("V001", "TechCraft Solutions", ["web development"],
     "React, Next.js, e-commerce platforms, custom web applications",
     "New York, NY", "Sarah Johnson", "sarah@techcraft.com",
     "Hourly", "$75-125/hour", "Available", 8.7, 92.0, 14),
    ("V002", "DesignPro Studio", ["design", "graphic design"],
     "Brand identity, UI/UX design, marketing materials, logos",
     "Los Angeles, CA", "Mike Chen", "mike@designpro.com",
     "Hourly", "$50-80/hour", "Limited", 8.1, 85.0, 9),
    ("V003", "DataFlow Analytics", ["data analytics"],
     "Business intelligence, data visualization, machine learning, reporting",
     "Austin, TX", "Lisa Rodriguez", "lisa@dataflow.com",
     "Hourly", "$90-150/hour", "Available", 9.2, 100.0, 6),
    ("V004", "CloudSecure IT", ["consulting"],
     "Cloud infrastructure, cybersecurity, system administration, DevOps",
     "Seattle, WA", "James Wilson", "james@cloudsecure.com",
     "Retainer", "$85-120/hour", "Unavailable", 7.4, 70.0, 4),
    ("V005", "ContentMasters Agency", ["content", "copywriting"],
     "Copywriting, content strategy, social media, video production",
     "Chicago, IL", "Emma Thompson", "emma@contentmasters.com",
     "Per project", "$40-70/hour", "Available", 8.9, 95.0, 21),
    ("V006", "MobileCraft Apps", ["mobile app", "app development"],
     "iOS apps, Android apps, React Native, Flutter, app store optimization",
     "San Francisco, CA", "Alex Kim", "alex@mobilecraft.com",
     "Hourly", "$80-140/hour", "On Leave", 8.4, 88.0, 11),
    ("V007", "GrowthHack Marketing", ["marketing", "seo"],
     "SEO, PPC advertising, social media marketing, email campaigns",
     "Miami, FL", "Carlos Rodriguez", "carlos@growthhack.com",
     "Monthly", "$60-95/hour", "Available", 7.9, 80.0, 7),
    ("V008", "Pixel & Prose", ["content", "web development"],
     "Technical writing, blog content, WordPress sites",
     "Denver, CO", "Priya Patel", "priya@pixelprose.com",
     "Per word", "$0.20/word", "Limited", None, None, 0),
]


def init_database():
    """Create all database tables."""
    print("Creating database tables...")
    Base.metadata.create_all(get_engine())
    print("Tables created successfully.")


def seed_sample_vendors():
    """Insert sample vendors and their performance rows if missing."""
    added = 0
    with session_scope(get_session_factory()) as db:
        for (vendor_id, name, categories, skills, location, contact, email,
             pricing, rate, availability, rating, rec_pct, projects) in SAMPLE_VENDORS:
            if db.get(Vendor, vendor_id) is not None:
                continue
            db.add(Vendor(
                vendor_id=vendor_id,
                vendor_name=name,
                service_categories=categories,
                vendor_type=", ".join(categories),
                skills=skills,
                pricing_structure=pricing,
                rate_cost=rate,
                availability_status=availability,
                status="active",
                location=location,
                contact_name=contact,
                contact_email=email,
            ))
            db.add(VendorPerformance(
                vendor_id=vendor_id,
                avg_overall_rating=rating,
                recommendation_pct=rec_pct,
                rated_projects=projects,
            ))
            added += 1
    print(f"Sample vendors added: {added} (skipped {len(SAMPLE_VENDORS) - added} existing)")
    return added


def list_tables():
    """List all tables in the database."""
    inspector = inspect(get_engine())
    tables = inspector.get_table_names()
    print("\nDatabase tables:")
    for table in sorted(tables):
        print(f"  - {table}")
    return tables


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create ViRA tables")
    parser.add_argument("--seed", action="store_true", help="Insert sample vendors")
    args = parser.parse_args()

    init_database()
    tables = list_tables()

    required = ["vendors", "vendor_performance", "chat_messages"]
    missing = [t for t in required if t not in tables]
    if missing:
        print(f"\nWarning: Missing tables: {missing}")
    else:
        print("\nAll tables present.")

    if args.seed:
        print()
        seed_sample_vendors()
