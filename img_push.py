import os
import sys
import argparse
import getpass
import logging

from upload_app.conf import UploadConfig
from upload_app.crypto import decrypt_token, encrypt_token
from upload_app.errors import DecryptionError, GitHubApiError, UploadError
from upload_app.helpers import push_image

CONFIG = UploadConfig.from_env()
PASSPHRASE_ENV = "UPLOAD_PASSPHRASE"

logger = logging.getLogger("upload_app.cli")


def read_passphrase(prompt="Upload password: "):
    passphrase = os.getenv(PASSPHRASE_ENV)
    if passphrase:
        return passphrase
    return getpass.getpass(prompt)


def push(file_path, path=None, message=None, config=None):
    config = config or CONFIG
    try:
        with open(file_path, 'rb') as f:
            content = f.read()
    except OSError as e:
        print(f"Cannot read {file_path}: {e}")
        return 1

    filename = os.path.basename(file_path)
    try:
        sha, path = push_image(config, read_passphrase(), filename, content, path=path, message=message)
    except DecryptionError as e:
        print(f"Wrong password: {e}")
        return 1
    except GitHubApiError as e:
        logger.error("Push of %s to %s failed: %s", filename, config.full_name, e)
        print(f"Upload failed: {e}")
        return 1
    except UploadError as e:
        print(f"Upload rejected: {e}")
        return 1

    print(f"Pushed {filename} to {config.full_name}@{config.branch}:{path} ({sha[:7]})")
    return 0


def check(show=False, config=None):
    config = config or CONFIG
    try:
        token = decrypt_token(read_passphrase(), config.encrypted_token)
    except DecryptionError as e:
        print(f"Wrong password: {e}")
        return 1
    print(token if show else "Password unlocks the stored token.")
    return 0


def encrypt(token=None, iterations=10000):
    token = token or getpass.getpass("Token to encrypt: ")
    passphrase = read_passphrase("New upload password: ")
    print(encrypt_token(passphrase, token, iterations=iterations))
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Push an image to the configured GitHub branch")
    parser.add_argument('command', choices=['push', 'decrypt', 'encrypt'], help='img_push commands')
    parser.add_argument('-f', '--file', type=str, help='Image to push')
    parser.add_argument('-p', '--path', type=str, help=f'Path in the repository (default {CONFIG.target_path})')
    parser.add_argument('-m', '--message', type=str, help='Commit message')
    parser.add_argument('-t', '--token', type=str, help='Token for the encrypt command')
    parser.add_argument('--iter', type=int, default=10000, help='PBKDF2 iterations for encrypt')
    parser.add_argument('--show', action='store_true', help='Print the decrypted token')
    parser.add_argument('-v', '--verbose', action='store_true')

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    if args.command == 'push':
        if not args.file:
            parser.error('push requires a -f file')
        return push(args.file, args.path, args.message)
    elif args.command == 'decrypt':
        return check(args.show)
    else:
        return encrypt(args.token, args.iter)


if __name__ == '__main__':
    sys.exit(main())
