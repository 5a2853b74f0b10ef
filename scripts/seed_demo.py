"""
Fills the database with demo waitlists and several months of signups.

    python scripts/seed_demo.py --months 4 --seed 42
"""

import argparse
import datetime
import random
import sys
from dotenv import load_dotenv

load_dotenv()

from zerolist.core.db import session, init as db_init
from zerolist.core.models import Waitlist, Signup, CONFIRMED, PENDING
from zerolist.core.utils import utcnow

WAITLISTS = [
    {
        "name": "Acme AI Assistant",
        "slug": "acme-ai",
        "primary_color": "#6366f1",
        "double_opt_in": True,
        "custom_fields": [
            {"key": "company", "label": "Company", "type": "text", "required": False},
            {"key": "role", "label": "Your Role", "type": "text", "required": False},
        ],
    },
    {
        "name": "CloudSync Pro",
        "slug": "cloudsync",
        "primary_color": "#10b981",
        "double_opt_in": True,
        "custom_fields": [
            {"key": "usecase", "label": "Primary Use Case", "type": "textarea", "required": True},
        ],
    },
    {
        "name": "DevTools Beta",
        "slug": "devtools-beta",
        "primary_color": "#f59e0b",
        "double_opt_in": False,
        "custom_fields": [],
    },
    {
        "name": "Startup Weekend NYC",
        "slug": "startup-weekend-nyc",
        "primary_color": "#ec4899",
        "double_opt_in": True,
        "custom_fields": [
            {"key": "linkedin", "label": "LinkedIn Profile", "type": "text", "required": False},
            {"key": "idea", "label": "Startup Idea (optional)", "type": "textarea", "required": False},
        ],
    },
    {
        "name": "Fitness App Early Access",
        "slug": "fitapp",
        "primary_color": "#ef4444",
        "double_opt_in": False,
        "custom_fields": [
            {"key": "goal", "label": "Fitness Goal", "type": "text", "required": True},
        ],
    },
]

# Relative popularity, by index into WAITLISTS
POPULARITY = [2, 1.5, 1, 0.8, 0.6]

REFERRAL_SOURCES = {
    "twitter": 25, "producthunt": 15, "google": 20, "linkedin": 10,
    "reddit": 8, "hackernews": 7, "friend": 10, None: 5,
}

EMAIL_DOMAINS = {
    "gmail.com": 40, "yahoo.com": 10, "hotmail.com": 8, "outlook.com": 12,
    "icloud.com": 5, "protonmail.com": 5, "company.com": 10, "startup.io": 5,
    "dev.to": 5,
}

FIRST_NAMES = [
    "alex", "jordan", "taylor", "morgan", "casey", "riley", "jamie", "drew",
    "sam", "quinn", "avery", "blake", "cameron", "dakota", "emery", "finley",
    "harper", "hayden", "jesse", "kai", "kendall", "logan", "maddox", "nico",
    "parker", "peyton", "reese", "river", "rowan", "sage", "sawyer", "skyler",
    "spencer", "sydney", "teagan", "devon", "ellis", "frankie", "gray", "indigo",
    "james", "lee", "max", "oliver", "emma", "sophia", "liam", "noah",
    "ava", "isabella", "mia", "charlotte", "amelia", "luna", "ella", "ellie",
]

COMPANIES = [
    "Stripe", "Vercel", "Figma", "Notion", "Linear", "Raycast", "Arc",
    "Supabase", "PlanetScale", "Railway", "Fly.io", "Render", "Neon",
    "Resend", "Clerk", "Auth0", "WorkOS", "Propel", "Statsig", "LaunchDarkly",
    "Freelance", "Startup", "Agency", "Enterprise Co", "Tech Corp",
]

ROLES = [
    "Software Engineer", "Product Manager", "Designer", "Founder", "CTO",
    "Engineering Manager", "DevOps Engineer", "Full Stack Developer",
    "Frontend Developer", "Backend Developer", "Data Scientist", "ML Engineer",
    "Growth Lead", "Marketing Manager", "CEO", "VP Engineering",
]

USE_CASES = [
    "Team collaboration and file sharing",
    "Personal cloud backup",
    "Development workflow sync",
    "Cross-device file access",
    "Enterprise document management",
    "Media storage and streaming",
]

FITNESS_GOALS = [
    "Lose weight", "Build muscle", "Improve cardio", "Train for marathon",
    "Get stronger", "Better flexibility", "General fitness", "Sports training",
]

IDEAS = [
    "track their habits",
    "learn new skills",
    "connect with mentors",
    "manage their finances",
    "improve productivity",
]


def weighted(rng, weights):
    return rng.choices(list(weights), weights=list(weights.values()))[0]

def make_email(rng):
    suffix = rng.randint(1, 999) if rng.random() > 0.6 else ""
    return f"{rng.choice(FIRST_NAMES)}{suffix}@{weighted(rng, EMAIL_DOMAINS)}"

def signups_for_day(rng, day, date, popularity):
    """Launch spike in the first week, rare viral days, quieter weekends."""
    base = rng.randint(2, 8)
    launch = rng.randint(10, 30) if day < 7 else 0
    viral = rng.randint(20, 50) if rng.random() < 0.02 else 0
    weekend = 0.5 if date.weekday() >= 5 else 1
    return round((base + launch + viral) * weekend * popularity)

def custom_data(rng, fields):
    data = {}
    for field in fields:
        key = field["key"]
        if key == "company" and rng.random() > 0.3:
            data[key] = rng.choice(COMPANIES)
        elif key == "role" and rng.random() > 0.4:
            data[key] = rng.choice(ROLES)
        elif key == "usecase":
            data[key] = rng.choice(USE_CASES)
        elif key == "goal":
            data[key] = rng.choice(FITNESS_GOALS)
        elif key == "linkedin" and rng.random() > 0.6:
            data[key] = f"https://linkedin.com/in/{rng.choice(FIRST_NAMES)}{rng.randint(100, 9999)}"
        elif key == "idea" and rng.random() > 0.7:
            data[key] = "An app that helps people " + rng.choice(IDEAS)
    return data


def seed(months=4, rng=None, now=None):
    """Replaces every waitlist and signup with generated demo data.
    Returns the number of signups created.
    """
    rng = rng or random.Random()
    now = now or utcnow()
    start = now - datetime.timedelta(days=30 * months)
    total_days = (now - start).days

    session.query(Signup).delete()
    session.query(Waitlist).delete()

    created = 0
    for index, blueprint in enumerate(WAITLISTS):
        created_at = start + datetime.timedelta(days=index * rng.randint(3, 10))
        waitlist = Waitlist(allowed_origins=[], created_at=created_at, updated_at=created_at, **blueprint)
        session.add(waitlist)
        session.flush()

        used, position = set(), 1
        first_day = (created_at - start).days
        for day in range(first_day, total_days):
            date = start + datetime.timedelta(days=day)
            for _ in range(signups_for_day(rng, day - first_day, date, POPULARITY[index])):
                email = make_email(rng)
                for _ in range(100):
                    if email not in used:
                        break
                    email = make_email(rng)
                else:
                    continue
                used.add(email)

                signed_up = date.replace(
                    hour=rng.randint(6, 23), minute=rng.randint(0, 59), second=rng.randint(0, 59))
                # Older signups are more likely to have confirmed
                p_confirm = min(0.85, (total_days - day) / 10) if blueprint["double_opt_in"] else 1
                confirmed = rng.random() < p_confirm

                session.add(Signup(
                    waitlist_id=waitlist.id,
                    email=email,
                    position=position,
                    status=CONFIRMED if confirmed else PENDING,
                    custom_data=custom_data(rng, blueprint["custom_fields"]),
                    referral_source=weighted(rng, REFERRAL_SOURCES),
                    created_at=signed_up,
                    confirmed_at=(signed_up + datetime.timedelta(seconds=rng.randint(60, 86400))
                                  if confirmed else None),
                ))
                position += 1
                created += 1
    session.commit()
    return created


def main():
    parser = argparse.ArgumentParser(description="Seed zerolist with demo waitlists and signups")
    parser.add_argument("--months", type=int, default=4, help="Months of history to generate")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible data")
    args = parser.parse_args()

    try:
        db_init()
        count = seed(months=args.months, rng=random.Random(args.seed))
        print(f"Success! Seeded {len(WAITLISTS)} waitlists with {count} signups.")
    except Exception as e:
        session.rollback()
        print(f"Database error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        session.close()

if __name__ == "__main__":
    main()
