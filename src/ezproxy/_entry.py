"""Console entry point: global flags anywhere in argv, usage errors exit 1."""

import sys

GLOBAL_FLAGS = frozenset({"--dry-run", "--yes", "-y", "--verbose", "-v"})


def split_global_flags(argv):
    """Move global flags in front of the subcommand so Click sees them on the group."""
    if "--" in argv:
        cut = argv.index("--")
        head, tail = argv[:cut], argv[cut:]
    else:
        head, tail = argv, []
    flags = [a for a in head if a in GLOBAL_FLAGS]
    rest = [a for a in head if a not in GLOBAL_FLAGS]
    return flags + rest + tail


def main(argv=None):
    from ezproxy.cli.main import app

    args = split_global_flags(list(sys.argv[1:] if argv is None else argv))
    try:
        app(args=args, prog_name="ezproxy")
    except SystemExit as e:
        # Click reports usage errors as 2.
        if e.code == 2:
            raise SystemExit(1) from None
        raise


if __name__ == "__main__":
    main()
