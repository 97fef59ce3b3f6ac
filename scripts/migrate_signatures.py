"""Regenerate digital signatures and boarding passes for every stored booking."""
from __future__ import annotations

import argparse
import logging
import sys

from flightbook.config import Settings
from flightbook.service import build_service


def main() -> None:
    parser = argparse.ArgumentParser(description="Re-sign all bookings")
    parser.add_argument("--keys-dir", help="directory holding private.pem/public.pem")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings = Settings()
    if args.keys_dir:
        settings.keys_dir = args.keys_dir

    service = build_service(settings)
    print(f"[+] Signing with key {service.engine.fingerprint[:16]}")

    ok, failed = service.resign_all()

    print("=" * 50)
    print(f"[+] Successfully processed: {ok} bookings")
    if failed:
        print(f"[!] Failed to process: {failed} bookings")
    print("=" * 50)
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
