#!/usr/bin/env python3
"""
Generate a secret key for the League Pick'em application
The key signs API tokens, so rotating it logs every user out
"""

import secrets


def generate_secrets():
    """Generate a secure random key for the application"""
    print("🔐 Generating secure secrets for League Pick'em...")
    print("=" * 50)

    print(f"SECRET_KEY={secrets.token_urlsafe(32)}")

    print("=" * 50)
    print("📝 Copy this value to your .env file")
    print("⚠️  Keep it secure and never commit it to version control!")


if __name__ == "__main__":
    generate_secrets()
