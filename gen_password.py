# gen_password.py
import sys

from estate_portal.core.security import hash_password


def main():
    if len(sys.argv) != 2:
        print("Usage: python gen_password.py <password>", file=sys.stderr)
        print("Example: python gen_password.py admin123", file=sys.stderr)
        sys.exit(1)

    password = sys.argv[1]
    hashed = hash_password(password)

    print(f"Password: {password}")
    print(f"Hash: {hashed}")
    print()
    print("To update in database:")
    print(f"UPDATE users SET password = '{hashed}' WHERE name = 'admin';")


if __name__ == "__main__":
    main()
