#!/usr/bin/env python3
"""
Seed script for DevCamper development.

Loads a handful of sample bootcamps, each owned by a different publisher,
or removes every bootcamp with --destroy.

Run with: python scripts/seed_data.py [--destroy]
"""
import argparse
import asyncio

from pymongo.errors import DuplicateKeyError

from devcamper.database import init_db, close_db
from devcamper.models.documents import Bootcamp

SAMPLE_BOOTCAMPS = [
    {
        "name": "Devworks Bootcamp",
        "description": "Full stack web development with modern JavaScript and Python",
        "website": "https://devworks.com",
        "email": "enroll@devworks.com",
        "address": "233 Bay State Rd Boston MA 02215",
        "careers": ["Web Development", "UI/UX", "Business"],
        "average_cost": 10000,
        "housing": True,
        "job_assistance": True,
        "job_guarantee": False,
        "accept_gi": True,
        "user": "publisher-001",
    },
    {
        "name": "ModernTech Bootcamp",
        "description": "Front end and mobile development taught by working engineers",
        "website": "https://moderntech.com",
        "email": "enroll@moderntech.com",
        "address": "220 Pawtucket St, Lowell, MA 01854",
        "careers": ["Web Development", "UI/UX", "Mobile Development"],
        "average_cost": 7500,
        "housing": False,
        "job_assistance": True,
        "job_guarantee": False,
        "accept_gi": True,
        "user": "publisher-002",
    },
    {
        "name": "Codemasters",
        "description": "Data science and business analytics for career changers",
        "website": "https://codemasters.com",
        "email": "enroll@codemasters.com",
        "address": "85 South Prospect Street Burlington VT 05405",
        "careers": ["Web Development", "Data Science", "Business"],
        "average_cost": 12500,
        "housing": False,
        "job_assistance": False,
        "job_guarantee": True,
        "accept_gi": False,
        "user": "publisher-003",
    },
]


async def seed():
    for data in SAMPLE_BOOTCAMPS:
        if await Bootcamp.find_one({"user": data["user"]}):
            print(f"Skipped bootcamp: {data['name']} ({data['user']} already owns one)")
            continue
        bootcamp = Bootcamp(**data, publisher_slot=data["user"])
        try:
            await bootcamp.insert()
        except DuplicateKeyError:
            print(f"Skipped bootcamp: {data['name']} ({data['user']} already owns one)")
            continue
        print(f"Created bootcamp: {bootcamp.name} ({bootcamp.id}) owned by {bootcamp.user}")


async def destroy():
    result = await Bootcamp.delete_all()
    print(f"Deleted {result.deleted_count if result else 0} bootcamps")


async def main():
    parser = argparse.ArgumentParser(description="Seed the DevCamper database")
    parser.add_argument("--destroy", action="store_true", help="Delete all bootcamps instead")
    args = parser.parse_args()

    await init_db()
    try:
        if args.destroy:
            await destroy()
        else:
            await seed()
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
