# verify_password.py
import sys

from estate_portal.core.security import hash_password, verify_password


def main():
    if len(sys.argv) != 3:
        print("Usage: python verify_password.py <password> <hash>", file=sys.stderr)
        print("Example: python verify_password.py admin123 '$argon2id$v=19$...'", file=sys.stderr)
        sys.exit(1)

    password, stored_hash = sys.argv[1], sys.argv[2]

    print("Testing password verification...")
    print(f"Password: {password}")
    print(f"Hash: {stored_hash}")
    print()

    if verify_password(password, stored_hash):
        print("✅ SUCCESS: Password verification passed!")
        sys.exit(0)

    new_hash = hash_password(password)
    print("❌ FAILED: Password verification failed!")
    print()
    print(f"New hash for this password: {new_hash}")
    print()
    print("SQL to update:")
    print(f"UPDATE users SET password = '{new_hash}' WHERE name = 'admin';")
    sys.exit(1)


if __name__ == "__main__":
    main()
