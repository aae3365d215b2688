"""Copy the web client's service worker into its public directory."""

import shutil
import sys
from argparse import ArgumentParser
from pathlib import Path
from typing import List, Optional

DEFAULT_SOURCE = Path("client") / "src" / "serviceWorker.js"
DEFAULT_DESTINATION = Path("client") / "public" / "serviceWorker.js"


def copy_service_worker(source: Path, destination: Path) -> Path:
    """
    Copy ``source`` to ``destination`` byte for byte.

    The destination directory is created when missing.

    Raises:
        OSError: If the source cannot be read or the destination written
    """
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, destination)
    return destination


def main(argv: Optional[List[str]] = None) -> int:
    parser = ArgumentParser(description=__doc__)
    parser.add_argument("--source", type=Path, default=DEFAULT_SOURCE, help="Service worker to copy")
    parser.add_argument("--destination", type=Path, default=DEFAULT_DESTINATION, help="Target path")
    args = parser.parse_args(argv)

    try:
        copy_service_worker(args.source, args.destination)
    except OSError as e:
        print(f"Error copying service worker: {e}", file=sys.stderr)
        return 1

    print("Service worker copied successfully to public directory")
    return 0


if __name__ == "__main__":
    sys.exit(main())
