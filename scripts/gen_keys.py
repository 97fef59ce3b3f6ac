"""Create the deployment RSA key pair for booking signatures."""
from __future__ import annotations

import argparse
from pathlib import Path

from flightbook.crypto.keys import (
    PRIVATE_KEY_FILE,
    PUBLIC_KEY_FILE,
    KeyMaterial,
    generate_key_pair,
    write_key_pair,
)


def generate_keys(out_dir: Path, force: bool = False) -> KeyMaterial:
    key_path = out_dir / PRIVATE_KEY_FILE
    pub_path = out_dir / PUBLIC_KEY_FILE
    if (key_path.exists() or pub_path.exists()) and not force:
        raise SystemExit(
            f"[!] {out_dir} already holds a key pair; replacing it breaks every stored "
            "signature (use --force to overwrite anyway)"
        )

    public_pem, private_pem = generate_key_pair()
    write_key_pair(out_dir, public_pem, private_pem)
    material = KeyMaterial.from_pem(private_pem, public_pem)

    print(f"[+] Wrote private key: {key_path}")
    print(f"[+] Wrote public key:  {pub_path}")
    print(f"[+] Fingerprint: {material.fingerprint}")
    return material


def main() -> None:
    parser = argparse.ArgumentParser(description="Create booking signature key pair")
    parser.add_argument(
        "--out",
        default="keys",
        help="Output directory for private.pem/public.pem (default: keys)",
    )
    parser.add_argument("--force", action="store_true", help="overwrite an existing pair")
    args = parser.parse_args()

    generate_keys(Path(args.out), force=args.force)


if __name__ == "__main__":
    main()
