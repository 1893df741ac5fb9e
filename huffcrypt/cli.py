"""
Command line entry point.

    huffcrypt compress INPUT OUTPUT
    huffcrypt decompress INPUT OUTPUT

The password is prompted for, or read from the environment variable named
by --password-env.
"""

import argparse
import getpass
import os
import sys
import tempfile

from loguru import logger

from .compression import Compressor
from .config_loader import configure_logging, load_config
from .exceptions import HuffcryptError


def build_parser():
    parser = argparse.ArgumentParser(
        prog="huffcrypt",
        description="Huffman compressor with a password-masked frequency table",
    )
    parser.add_argument("--config", help="YAML config file merged over the defaults")
    parser.add_argument("--log-level", help="Overrides logging.level from the config")
    parser.add_argument("--password-env", metavar="NAME",
                        help="Read the password from this environment variable instead of prompting")

    commands = parser.add_subparsers(dest="command", required=True)
    for name in ("compress", "decompress"):
        command = commands.add_parser(name, help=f"{name} INPUT into OUTPUT")
        command.add_argument("input")
        command.add_argument("output")
    return parser


def read_password(args):
    if args.password_env:
        password = os.getenv(args.password_env)
        if password is None:
            raise SystemExit(f"Environment variable {args.password_env} is not set.")
        return password

    password = getpass.getpass("Enter password: ")
    if args.command == "compress" and getpass.getpass("Confirm password: ") != password:
        raise SystemExit("Passwords do not match.")
    return password


def run(args, compressor, password):
    # Output goes to a temporary file next to the target and is moved into
    # place only once the whole run succeeded.
    directory = os.path.dirname(os.path.abspath(args.output))
    with open(args.input, "rb") as infile, tempfile.NamedTemporaryFile(
        "wb", dir=directory, prefix=".huffcrypt-", delete=False
    ) as tmp:
        try:
            if args.command == "compress":
                compressor.compress(infile, tmp, password)
            else:
                compressor.decompress(infile, tmp, password)
        except BaseException:
            tmp.close()
            os.unlink(tmp.name)
            raise
    os.replace(tmp.name, args.output)


def main(argv=None):
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    configure_logging(args.log_level or config["logging"]["level"])

    password = read_password(args)
    compressor = Compressor(config["io"]["chunk_size"])
    try:
        run(args, compressor, password)
    except (HuffcryptError, OSError) as e:
        logger.error("{} failed: {}", args.command, e)
        return 1

    logger.info("Wrote {}", args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
