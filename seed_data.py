"""Fixture accounts and communities loaded into the database at startup."""
import logging
from auth import hash_password
from database import get_db, transaction

logger = logging.getLogger(__name__)

SEED_USERS = [
    {"username": "user1", "email": "user1@colorado.edu", "password": "user123",
     "role": "member", "first_name": "Alex", "last_name": "Rivera"},
    {"username": "user2", "email": "user2@colorado.edu", "password": "user234",
     "role": "member", "first_name": "", "last_name": ""},
    {"username": "moderator", "email": "moderator@colorado.edu", "password": "moderator123",
     "role": "moderator", "first_name": "Morgan", "last_name": "Lee"},
    {"username": "admin", "email": "admin@colorado.edu", "password": "admin123",
     "role": "admin", "first_name": "Site", "last_name": "Admin"},
]

SEED_COMMUNITIES = [
    {"name": "CS Study Group", "description": "Homework help and exam prep for computer science courses.",
     "community_type": "Academic", "created_by": "user1"},
    {"name": "Intramural Soccer", "description": "Pickup games and league schedules.",
     "community_type": "Sports", "created_by": "user2"},
    {"name": "Photography Club", "description": "Share your shots from around campus.",
     "community_type": "Hobby", "created_by": "moderator"},
]


def seed_db():
    """Insert the fixture rows, leaving any existing rows untouched"""
    with get_db() as conn:
        with transaction(conn) as cursor:
            for user in SEED_USERS:
                cursor.execute("SELECT 1 FROM users WHERE username = ?", (user["username"],))
                if cursor.fetchone():
                    continue
                cursor.execute("""
                    INSERT OR IGNORE INTO users (username, email, password_hash, role, first_name, last_name)
                    VALUES (?, ?, ?, ?, ?, ?)
                """, (user["username"], user["email"], hash_password(user["password"]),
                      user["role"], user["first_name"], user["last_name"]))
            for community in SEED_COMMUNITIES:
                cursor.execute("SELECT user_id FROM users WHERE username = ?", (community["created_by"],))
                creator = cursor.fetchone()
                if not creator:
                    continue
                cursor.execute("""
                    INSERT OR IGNORE INTO communities (name, description, community_type, created_by)
                    VALUES (?, ?, ?, ?)
                """, (community["name"], community["description"], community["community_type"], creator[0]))
                cursor.execute("SELECT community_id FROM communities WHERE name = ?", (community["name"],))
                community_id = cursor.fetchone()[0]
                cursor.execute(
                    "INSERT OR IGNORE INTO community_members (user_id, community_id) VALUES (?, ?)",
                    (creator[0], community_id)
                )
    logger.info("Seed data loaded (%d users, %d communities)", len(SEED_USERS), len(SEED_COMMUNITIES))
