import argparse
import json
import os
import sys
from typing import List, Optional

from .api import StorageError, download_file, list_directory, make_directory, remove_entry, upload_file
from .client import StorageClient
from .models import Outcome
from .paths import InvalidNameError, child_path, leaf_name, normalize, parent_of, validate_name

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFLICT = 2

CONFLICT_MESSAGES = {
    'mkdir': 'Directory already exists',
    'rm': 'Directory not empty',
    'put': 'File already exists',
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog='nsclient')
    p.add_argument('--base-url', help='storage server URL (default: $NSCLIENT_BASE_URL)')
    p.add_argument('--timeout', type=float)
    sub = p.add_subparsers(dest='cmd', required=True)

    ls = sub.add_parser('ls')
    ls.add_argument('path', nargs='?', default='/')
    ls.add_argument('--json', action='store_true')

    mkdir = sub.add_parser('mkdir')
    mkdir.add_argument('path')

    rm = sub.add_parser('rm')
    rm.add_argument('path')

    put = sub.add_parser('put')
    put.add_argument('local')
    put.add_argument('--dir', default='/', help='remote directory to upload into')

    get = sub.add_parser('get')
    get.add_argument('path')
    get.add_argument('--out')

    return p


def _report(cmd: str, outcome: Outcome) -> int:
    if outcome is Outcome.SUCCESS:
        print('OK')
        return EXIT_OK
    if outcome is Outcome.CONFLICT:
        print(f'Error: {CONFLICT_MESSAGES[cmd]}', file=sys.stderr)
        return EXIT_CONFLICT
    print('Error: Something went wrong', file=sys.stderr)
    return EXIT_FAILURE


def _split_new_path(path: str) -> str:
    location = normalize(path)
    parent = parent_of(location)
    if parent is None:
        raise InvalidNameError('Cannot create the root directory')
    return child_path(parent, validate_name(leaf_name(location)))


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    with StorageClient(base_url=args.base_url, timeout=args.timeout) as client:
        try:
            if args.cmd == 'ls':
                listing = list_directory(client, args.path)
                if args.json:
                    print(json.dumps({
                        'path': listing.location,
                        'dirs': [{'name': e.name, 'path': e.path} for e in listing.dirs],
                        'files': [{'name': e.name, 'path': e.path} for e in listing.files],
                    }, indent=2))
                else:
                    for entry in listing.dirs:
                        print(f"{entry.name}/")
                    for entry in listing.files:
                        print(entry.name)
                return EXIT_OK

            if args.cmd == 'mkdir':
                return _report('mkdir', make_directory(client, _split_new_path(args.path)))

            if args.cmd == 'rm':
                return _report('rm', remove_entry(client, normalize(args.path)))

            if args.cmd == 'put':
                name = validate_name(os.path.basename(args.local))
                return _report('put', upload_file(client, child_path(normalize(args.dir), name), args.local))

            if args.cmd == 'get':
                dest = args.out or leaf_name(args.path)
                download_file(client, normalize(args.path), dest)
                print(f'Saved {dest}')
                return EXIT_OK
        except (StorageError, InvalidNameError, OSError) as exc:
            print(f'Error: {exc}', file=sys.stderr)
            return EXIT_FAILURE

    return EXIT_FAILURE


if __name__ == '__main__':
    raise SystemExit(main())
