"""Shared fixtures for benchmark tests."""

import pytest


@pytest.fixture(name="large_feeds")
def large_feeds_fixture():
    """
    Build a directory-sized set of raw feeds.

    2000 mosques; every third has an approved admin, every fifth a pending one,
    and 300 rejected admins each carry three previous mosques.

    Returns:
        tuple: (mosques, approved_admins, pending_admins, rejected_admins) as raw feed items.
    """
    mosques = [
        {
            "_id": f"m{i}",
            "name": f"Masjid {i}",
            "location": f"Block {i % 40}, Lahore",
            "verification_code": f"CODE{i:05d}",
            "contact_email": f"masjid{i}@gmail.com",
            "createdAt": "2026-03-01T00:00:00Z",
        }
        for i in range(2000)
    ]
    approved = [
        {"_id": f"a{i}", "name": f"Admin {i}", "email": f"admin{i}@gmail.com", "mosque_id": {"_id": f"m{i}"}}
        for i in range(0, 2000, 3)
    ]
    pending = [
        {"_id": f"p{i}", "name": f"Applicant {i}", "email": f"applicant{i}@yahoo.com", "mosque_id": f"m{i}"}
        for i in range(0, 2000, 5)
    ]
    rejected = [
        {
            "_id": f"r{i}",
            "name": f"Rejected {i}",
            "previous_mosque_ids": [{"mosque_id": f"m{(i * 7 + k) % 2000}"} for k in range(3)],
        }
        for i in range(300)
    ]
    return mosques, approved, pending, rejected
