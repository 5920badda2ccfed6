"""Issue an identity token for local development.

In deployed environments tokens come from the identity provider. This
script signs one with IDENTITY_JWT_SECRET so the API can be exercised
locally, and refuses to run with ENV=prod.

    python scripts/issue_dev_token.py patient1@example.org --name "Test Patient"
"""

import argparse
import sys
from datetime import timedelta
from uuid import uuid4


def main():
    """Main entry point."""
    from consent_portal.core.config import settings
    from consent_portal.core.security import create_identity_token

    parser = argparse.ArgumentParser(description="Issue a development identity token")
    parser.add_argument("email", help="Email claim")
    parser.add_argument("--subject", default=None, help="Subject (defaults to a new UUID)")
    parser.add_argument("--name", default=None, help="Full name in user metadata")
    parser.add_argument("--hours", type=int, default=8, help="Token lifetime in hours")
    args = parser.parse_args()

    if settings.is_prod:
        print("Refusing to issue tokens with ENV=prod", file=sys.stderr)
        sys.exit(1)

    subject = args.subject or str(uuid4())
    token = create_identity_token(
        subject=subject,
        email=args.email,
        full_name=args.name,
        expires_delta=timedelta(hours=args.hours),
    )

    print(f"Subject: {subject}")
    print(f"Authorization: Bearer {token}")
    print(f"apikey: {settings.public_api_key}")


if __name__ == "__main__":
    main()
