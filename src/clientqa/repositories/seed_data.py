"""Demo dataset: 5 users, 20 clients and their shared access grants."""

SEED_TIMESTAMP = "2025-07-28T10:00:00"

SEED_USERS = [
    {"name": "User 1", "email": "user1@company.com", "role": "Manager"},
    {"name": "User 2", "email": "user2@company.com", "role": "Sales Rep"},
    {"name": "User 3", "email": "user3@company.com", "role": "Support"},
    {"name": "User 4", "email": "user4@company.com", "role": "Sales Rep"},
    {"name": "User 5", "email": "user5@company.com", "role": "Admin"},
]

_INDUSTRIES = [
    ("Technology", 150000),
    ("Software", 85000),
    ("Manufacturing", 320000),
    ("Healthcare", 95000),
    ("Finance", 220000),
    ("Retail", 45000),
    ("Construction", 180000),
    ("Education", 65000),
    ("Transportation", 110000),
    ("Agriculture", 75000),
    ("Media", 55000),
    ("Consulting", 135000),
    ("Energy", 290000),
    ("Hospitality", 80000),
    ("Automotive", 125000),
    ("Pharmaceuticals", 200000),
    ("Real Estate", 0),
    ("Food & Beverage", 90000),
    ("Insurance", 165000),
    ("Fashion", 40000),
]

INACTIVE_CLIENTS = {17}

SEED_CLIENTS = [
    {
        "name": f"Client {n}",
        "email": f"client{n}@company.com",
        "phone": "+91 1234567890",
        "company": f"Company {n}",
        "industry": industry,
        "status": "inactive" if n in INACTIVE_CLIENTS else "active",
        "value": value,
    }
    for n, (industry, value) in enumerate(_INDUSTRIES, start=1)
]

# (user_id, client_id, access_level)
SEED_GRANTS = [
    # User 1: high-value clients
    (1, 1, "full"), (1, 3, "full"), (1, 5, "full"), (1, 13, "full"), (1, 16, "full"), (1, 19, "read"),
    # User 2: mixed portfolio
    (2, 1, "read"), (2, 2, "full"), (2, 7, "full"), (2, 9, "full"), (2, 12, "full"), (2, 15, "full"),
    # User 3: support
    (3, 4, "full"), (3, 6, "full"), (3, 8, "full"), (3, 10, "full"), (3, 14, "full"), (3, 18, "full"),
    # User 4: new prospects
    (4, 11, "full"), (4, 17, "full"), (4, 20, "full"), (4, 3, "read"), (4, 5, "read"),
    # User 5: oversight
    (5, 1, "read"), (5, 3, "read"), (5, 5, "read"), (5, 13, "read"), (5, 16, "read"), (5, 19, "full"),
]
