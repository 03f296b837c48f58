#!/usr/bin/env python3
"""
Generate a JWT for calling the DevCamper API.

Usage: python scripts/generate_jwt.py [subject] [--role ROLE] [--secret SECRET]
"""
import argparse
from datetime import datetime, timezone, timedelta
from jose import jwt


def generate_jwt(
    subject: str,
    role: str = "publisher",
    secret: str = "change-me-in-production",
    algorithm: str = "HS256",
    expires_hours: int = 24,
) -> str:
    """Generate a JWT token."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "role": role,
        "iat": now,
        "exp": now + timedelta(hours=expires_hours),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def main():
    parser = argparse.ArgumentParser(description="Generate JWT for DevCamper testing")
    parser.add_argument(
        "subject",
        nargs="?",
        default="publisher-001",
        help="Caller id (default: publisher-001)",
    )
    parser.add_argument(
        "--role",
        default="publisher",
        choices=["user", "publisher", "admin"],
        help="Caller role (default: publisher)",
    )
    parser.add_argument(
        "--secret",
        default="change-me-in-production",
        help="JWT secret key",
    )
    parser.add_argument(
        "--expires",
        type=int,
        default=24,
        help="Token expiration in hours (default: 24)",
    )

    args = parser.parse_args()

    token = generate_jwt(args.subject, args.role, args.secret, expires_hours=args.expires)

    print("=" * 60)
    print(f"Subject: {args.subject}  Role: {args.role}  Expires in: {args.expires}h")
    print(f"\nToken:\n  {token}")
    print("\nCreate a bootcamp with:")
    print('  curl -X POST http://localhost:8000/api/v1/bootcamps \\')
    print(f'    -H "Authorization: Bearer {token}" \\')
    print('    -H "Content-Type: application/json" \\')
    print('    -d \'{"name": "Devworks Bootcamp", "description": "Full stack web development", "careers": ["Web Development"]}\'')
    print("=" * 60)


if __name__ == "__main__":
    main()
