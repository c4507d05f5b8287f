#!/usr/bin/env python3
"""
Print a new random storage key (hex) for the sysKey configuration value.
"""

from cryptstore.services.storage_service import get_random_key


def main():
    print(get_random_key().hex)


if __name__ == "__main__":
    main()
