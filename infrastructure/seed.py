"""Sample hosts, a guest and listings for local development"""
import logging
from typing import List

from domain.enums import UserRole

logger = logging.getLogger(__name__)

SAMPLE_PASSWORD = "password123"

SAMPLE_USERS = [
    {"email": "john.host@example.com", "first_name": "John", "last_name": "Host", "role": UserRole.HOST},
    {"email": "jane.host@example.com", "first_name": "Jane", "last_name": "Host", "role": UserRole.HOST},
    {"email": "user@example.com", "first_name": "Test", "last_name": "User", "role": UserRole.GUEST},
]

# Keyed by the owning host's email
SAMPLE_LISTINGS = [
    ("john.host@example.com", {
        "title": "Luxury Beachfront Villa in Miami",
        "description": "Wake up to ocean views, private beach access and an infinity pool.",
        "location": {"address": "123 Ocean Drive", "city": "Miami", "state": "Florida",
                     "country": "USA", "lat": 25.7617, "lng": -80.1918},
        "price": {"base": 450, "currency": "USD", "cleaning_fee": 100, "service_fee": 50},
        "property_type": "villa",
        "room_type": "entire",
        "amenities": ["wifi", "pool", "beach access", "air conditioning"],
        "max_guests": 8, "bedrooms": 4, "beds": 5, "bathrooms": 3,
    }),
    ("john.host@example.com", {
        "title": "Cozy Downtown Studio",
        "description": "Compact studio a short walk from cafes, galleries and the metro.",
        "location": {"address": "45 Market Street", "city": "San Francisco", "state": "California",
                     "country": "USA"},
        "price": {"base": 120, "currency": "USD", "cleaning_fee": 30, "service_fee": 15},
        "property_type": "studio",
        "room_type": "entire",
        "amenities": ["wifi", "kitchen"],
        "max_guests": 2, "bedrooms": 0, "beds": 1, "bathrooms": 1,
    }),
    ("jane.host@example.com", {
        "title": "Mountain Cabin Retreat",
        "description": "Quiet log cabin with a fireplace and hiking trails from the door.",
        "location": {"address": "8 Pine Ridge Road", "city": "Aspen", "state": "Colorado",
                     "country": "USA"},
        "price": {"base": 220, "currency": "USD", "cleaning_fee": 60, "service_fee": 25},
        "property_type": "cabin",
        "room_type": "entire",
        "amenities": ["fireplace", "parking", "wifi"],
        "max_guests": 6, "bedrooms": 3, "beds": 3, "bathrooms": 2,
    }),
    ("jane.host@example.com", {
        "title": "Private Room in Brooklyn Apartment",
        "description": "Bright private room in a shared apartment near Prospect Park.",
        "location": {"address": "310 Park Place", "city": "Brooklyn", "state": "New York",
                     "country": "USA"},
        "price": {"base": 85, "currency": "USD", "cleaning_fee": 15, "service_fee": 10},
        "property_type": "apartment",
        "room_type": "private",
        "amenities": ["wifi", "washer"],
        "max_guests": 2, "bedrooms": 1, "beds": 1, "bathrooms": 1,
    }),
]


async def seed_sample_data(user_service, listing_service) -> List:
    """Create the sample accounts and any sample listing a host does not have yet.

    Safe to run more than once: listings are matched on host and title.
    """
    users = {}
    for user in SAMPLE_USERS:
        users[user["email"]] = await user_service.ensure_user(
            email=user["email"],
            password=SAMPLE_PASSWORD,
            first_name=user["first_name"],
            last_name=user["last_name"],
            role=user["role"]
        )

    created = []
    for host_email, data in SAMPLE_LISTINGS:
        host = users[host_email]
        existing = await listing_service.list_host_listings(host)
        if any(listing.title == data["title"] for listing in existing):
            continue
        created.append(await listing_service.create_listing(host, data))

    logger.info("Seeded %s users and %s listings", len(users), len(created))
    return created
